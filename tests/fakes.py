from concurrent.futures import Executor, Future

import requests


class ManualExecutor(Executor):
    """Holds submitted calls until the test runs them."""

    def __init__(self):
        self.queue = []

    def submit(self, fn, *args, **kwargs):
        future = Future()
        self.queue.append((future, fn, args, kwargs))
        return future

    @property
    def pending(self):
        return len(self.queue)

    def run_next(self):
        future, fn, args, kwargs = self.queue.pop(0)
        if not future.set_running_or_notify_cancel():
            return future
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future

    def run_all(self):
        while self.queue:
            self.run_next()


class ImmediateExecutor(Executor):
    def submit(self, fn, *args, **kwargs):
        future = Future()
        future.set_running_or_notify_cancel()
        try:
            future.set_result(fn(*args, **kwargs))
        except Exception as e:
            future.set_exception(e)
        return future


class FakeSource:
    name = "fake"

    def __init__(self, batches=None, api_key="key", error=None):
        self.api_key = api_key
        self.batches = list(batches or [])
        self.error = error
        self.calls = []

    @property
    def has_credential(self):
        return bool(self.api_key)

    def fetch(self, count, decimal_places):
        self.calls.append((count, decimal_places))
        if self.error is not None:
            raise self.error
        if self.batches:
            return self.batches.pop(0)
        return [round((i + 1) / (count + 1), decimal_places) for i in range(count)]


class FakeResponse:
    def __init__(self, payload=None, status=200, json_error=False):
        self.payload = payload
        self.status_code = status
        self.json_error = json_error

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error", response=self)

    def json(self):
        if self.json_error:
            raise ValueError("not json")
        return self.payload


class FakeSession:
    def __init__(self, response=None, error=None):
        self.response = response
        self.error = error
        self.requests = []

    def _respond(self, method, url, **kwargs):
        self.requests.append((method, url, kwargs))
        if self.error is not None:
            raise self.error
        return self.response

    def post(self, url, **kwargs):
        return self._respond("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self._respond("GET", url, **kwargs)


class Recorder(list):
    def __call__(self, item):
        self.append(item)
