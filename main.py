import logging

import streamlit as st

from auth import AuthError, SharedPasswordCheck
from challenge_calendar import build_challenge_days, chunk_by_week, to_iso
from leaderboard import build_leaderboard, format_number, week_total, weekly_progress
from phase import resolve_phase
from roster import find_participant, load_roster
from session import AppState, import_backup, log_steps, resume_last_user, sign_in, sign_out
from settings import Settings, setup_logging
from stats import compute_rank, compute_totals, resolve_badge
from storage import BACKUP_FILENAME, ChallengeStore, InvalidBackupError, export_backup

APP_NAME = "Wooly Walking"
st.set_page_config(page_title=APP_NAME, page_icon="👟", layout="wide")

settings = Settings.load()
setup_logging(settings.is_dev)
log = logging.getLogger("wooly_walking")

ROSTER = load_roster(settings.roster_file)
DAYS = build_challenge_days(settings.start, settings.end)
WEEKS = chunk_by_week(DAYS)
STORE = ChallengeStore(settings.data_file, ROSTER, DAYS)
CHECK = SharedPasswordCheck(settings.password)

# =====================================
# Session State (safe defaults)
# =====================================
def _ensure_state():
    ss = st.session_state
    if "app" not in ss:
        ss["app"] = AppState(data=STORE.load())
        # A remembered participant skips the sign-in form
        resumed = resume_last_user(ss["app"], ROSTER)
        if resumed:
            log.info("Resumed session for %s", resumed.username)
    ss.setdefault("weeks_expanded", None)  # None = only the first week open
    ss.setdefault("import_error", "")

_ensure_state()
app: AppState = st.session_state["app"]

# =====================================
# Callbacks
# =====================================
def _clear_step_widgets():
    for key in [k for k in st.session_state.keys() if str(k).startswith("steps_")]:
        del st.session_state[key]

def _on_steps_change(iso: str):
    log_steps(app, STORE, iso, st.session_state.get(f"steps_{iso}"))

def _on_backup_upload():
    uploaded = st.session_state.get("backup_upload")
    if uploaded is None:
        return
    try:
        text = uploaded.getvalue().decode("utf-8")
        import_backup(app, STORE, text, ROSTER, DAYS)
    except (InvalidBackupError, UnicodeDecodeError) as e:
        log.warning("Backup import rejected: %s", e)
        st.session_state["import_error"] = InvalidBackupError.user_message
        return
    st.session_state["import_error"] = ""
    _clear_step_widgets()

def _on_sign_out():
    sign_out(app)
    _clear_step_widgets()

def _expand_weeks(value):
    st.session_state["weeks_expanded"] = value

# =====================================
# Sign-in
# =====================================
if not app.active_user:
    st.title("👟 Wooly Walking Challenge")
    with st.form("login-form"):
        username = st.text_input("Username", value=app.last_user)
        password = st.text_input("Password", type="password")
        submitted = st.form_submit_button("Let's walk")
    if submitted:
        try:
            sign_in(app, STORE, username, password, ROSTER, CHECK)
        except AuthError as e:
            st.error(str(e))
        else:
            st.rerun()
    st.stop()

# =====================================
# Dashboard
# =====================================
participant = find_participant(ROSTER, app.active_user)
now = settings.now()
today_iso = to_iso(now)
phase = resolve_phase(now, settings.window)
participants = app.data["participants"]
my_steps = app.active_record()["dailySteps"]

st.sidebar.title(f"{participant.icon} {participant.name}")
st.sidebar.button("Sign out", on_click=_on_sign_out)
st.sidebar.markdown("---")
st.sidebar.title("💾 Backup")
st.sidebar.download_button(
    "Download backup",
    data=export_backup(app.data),
    file_name=BACKUP_FILENAME,
    mime="application/json",
)
st.sidebar.file_uploader("Import backup", type=["json"], key="backup_upload", on_change=_on_backup_upload)
if st.session_state["import_error"]:
    st.sidebar.error(st.session_state["import_error"])

st.title(f"{participant.icon} {participant.name}")
c1, c2 = st.columns([1, 3])
with c1:
    st.metric("Phase", phase.label)
    st.metric("Days left", max(0, phase.days_remaining))
with c2:
    st.write(phase.message)
    if phase.stealth:
        st.warning("🕵️ Stealth mode")

# Momentum cards
totals = compute_totals(my_steps, DAYS, now)
rank = compute_rank(app.active_user, ROSTER, participants, DAYS, now)
badge = resolve_badge(totals)
m1, m2, m3, m4 = st.columns(4)
m1.metric("Total steps", format_number(totals.total_steps), f"Ranked {rank.position} of {rank.total}", delta_color="off")
m2.metric("Best day", format_number(totals.best_day_steps), totals.best_day_label or "—", delta_color="off")
m3.metric("Current streak", totals.current_streak)
m4.metric("Badge", badge.title, badge.caption, delta_color="off")

tab_board, tab_progress, tab_weeks = st.tabs(["Leaderboard", "Weekly progress", "Log steps"])

with tab_board:
    st.caption(phase.leaderboard_copy)
    board = build_leaderboard(ROSTER, participants, DAYS, now, phase.phase, app.active_user)
    board["rank"] = board["rank"].map(lambda r: f"#{r}")
    board["participant"] = [
        f"{name} (you)" if is_self else name
        for name, is_self in zip(board["participant"], board["is_self"])
    ]
    st.dataframe(
        board[["rank", "participant", "total", "pace", "bar_percent"]],
        column_config={
            "bar_percent": st.column_config.ProgressColumn("Share of top", min_value=0, max_value=100, format="%d%%"),
        },
        hide_index=True,
        width="stretch",
    )

with tab_progress:
    progress = weekly_progress(my_steps, WEEKS, now, settings.weekly_goal)
    st.bar_chart(progress, y=["steps", "goal"], stack=False)
    st.caption(
        f"Weekly average: {format_number(totals.weekly_average)} steps · "
        f"goal pace {format_number(settings.weekly_goal)} / wk"
    )

with tab_weeks:
    b1, b2, _ = st.columns([1, 1, 4])
    b1.button("Expand all", on_click=_expand_weeks, args=(True,))
    b2.button("Collapse all", on_click=_expand_weeks, args=(False,))
    expanded = st.session_state["weeks_expanded"]

    for index, week in enumerate(WEEKS):
        total = week_total(my_steps, week)
        with st.expander(
            f"Week {index + 1} · {week.label} · {format_number(total)} steps",
            expanded=(index == 0) if expanded is None else expanded,
        ):
            for day in week.days:
                marker = " 📍 today" if day.iso == today_iso else ""
                st.number_input(
                    f"{day.short} {day.long}{marker}",
                    min_value=0,
                    step=1,
                    value=int(my_steps.get(day.iso, 0)),
                    key=f"steps_{day.iso}",
                    on_change=_on_steps_change,
                    args=(day.iso,),
                )
            st.caption(f"Week total: {format_number(total)} steps")

st.caption("Progress is stored locally. Download a backup before switching machines.")
