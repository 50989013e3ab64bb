
import os, io
from datetime import datetime, timezone
import numpy as np
import pandas as pd
import matplotlib.pyplot as plt
import streamlit as st

from truerandom import AnuQrngSource, DiceConfig, LocalStorage, RandomOrgSource, Settings, TrueRandomModule, roll
from truerandom import debug
from truerandom.settings import APIKEY, DEBUG, ENABLED, MAXCACHEDNUMBERS, QUICKTOGGLE, SHOWSEEDS, UPDATEPOINT

STORAGE_PATH = os.path.join(os.path.dirname(__file__), ".truerandom_storage.json")
PROVIDERS = {
    "random.org": RandomOrgSource,
    "ANU QRNG": lambda key: AnuQrngSource(),
}


def boot(provider):
    """One module per browser session, wired into that session's dice config."""
    st.session_state.chat = []
    st.session_state.alerts = []
    st.session_state.rolls = []
    config = DiceConfig()
    module = TrueRandomModule(
        config,
        settings=Settings(),
        storage=LocalStorage(STORAGE_PATH),
        alert=st.session_state.alerts.append,
        chat=st.session_state.chat.append,
        gm_ids=lambda: ["gm"],
        source_factory=PROVIDERS[provider],
    )
    debug.configure()
    module.init()
    if provider == "ANU QRNG":
        module.cache.bind(AnuQrngSource())
    st.session_state.provider = provider
    st.session_state.config = config
    st.session_state.module = module
    return module


st.sidebar.title("TrueRandom — Controls")
provider = st.sidebar.selectbox("Random source", list(PROVIDERS))
if "module" not in st.session_state or st.session_state.provider != provider:
    if "module" in st.session_state:
        st.session_state.module.uninstall()
    boot(provider)
module = st.session_state.module
config = st.session_state.config
s = module.settings

st.sidebar.write("---")
api_key = st.sidebar.text_input(s.spec(APIKEY).name, s.get(APIKEY), type="password", help=s.spec(APIKEY).hint)
s.set(APIKEY, api_key)
for key in (MAXCACHEDNUMBERS, UPDATEPOINT):
    spec = s.spec(key)
    lo, hi, step = spec.range
    s.set(key, st.sidebar.slider(spec.name, lo, hi, s.get(key), step, help=spec.hint))
st.sidebar.write("---")
for key in (ENABLED, QUICKTOGGLE, SHOWSEEDS, DEBUG):
    spec = s.spec(key)
    s.set(key, st.sidebar.checkbox(spec.name, s.get(key), key=f"cb_{key}", help=spec.hint))

st.title("TrueRandom — Dice Roller")

toggle = module.render_toggle(is_gm=True)
if toggle.visible:
    if st.button(toggle.label, help=toggle.title):
        toggle.click()
        st.session_state[f"cb_{ENABLED}"] = s.get(ENABLED)
        st.rerun()

for notice in st.session_state.alerts:
    st.warning(notice)

st.write("1) Roll")
c1, c2 = st.columns(2)
formula = c1.text_input("Formula", "3d6")
times = c2.slider("Repeat", 1, 200, 1, 1)
if st.button("Roll"):
    try:
        for _ in range(times):
            r = roll(formula, config)
            stamp = datetime.now(timezone.utc).strftime('%H:%M:%S.%f')[:-3]
            for u, face in zip(r.uniforms, r.results):
                st.session_state.rolls.append({"time": stamp, "formula": r.formula, "faces": r.faces,
                                               "uniform": u, "face": face, "total": r.total})
    except ValueError as e:
        st.error(str(e))

rolls = pd.DataFrame(st.session_state.rolls)
if not rolls.empty:
    last = rolls.iloc[-1]
    st.metric("Last total", int(last["total"]))
    st.write("### Rolls"); st.dataframe(rolls.tail(100))

    st.write("### Face distribution")
    faces = int(rolls["faces"].max())
    same = rolls[rolls["faces"] == faces]
    counts = same["face"].value_counts().reindex(range(1, faces+1), fill_value=0)
    expected = len(same) / float(faces)
    chi2 = float(np.sum((counts.values - expected)**2 / expected)) if expected else 0.0
    fig, ax = plt.subplots()
    ax.bar(counts.index, counts.values)
    ax.axhline(expected, linestyle="--")
    ax.set_title(f"d{faces} faces (chi² = {chi2:.2f}, dof = {faces-1})")
    ax.set_xlabel("Face"); ax.set_ylabel("Count")
    st.pyplot(fig); plt.close(fig)

    buf = io.StringIO(); rolls.to_csv(buf, index=False)
    st.download_button("Download rolls.csv", buf.getvalue(), file_name="rolls.csv", mime="text/csv")

st.write("2) Cache")
stats = module.cache.stats()
total = stats["true_random_count"] + stats["fallback_count"]
st.write(f"True-random ratio: **{stats['true_random_count'] / max(1, total):.3f}**")
st.json(stats)
if st.button("Refill now"):
    module.cache.refill()

if st.session_state.chat:
    st.write("3) Chat")
    for msg in reversed(st.session_state.chat[-20:]):
        st.text_area(f"{msg.speaker} → {', '.join(msg.whisper) or 'all'}", msg.content, height=90)
