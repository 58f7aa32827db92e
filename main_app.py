"""
What2Watch - quiz-driven recommendations with social buzz from Reddit.
Take the quiz, get a ranked list, rate it, and watch the accuracy numbers move.
"""

import streamlit as st
import sys
import os
import uuid

# =============================================================================
# IMPORTS AND SETUP
# =============================================================================

# Add src directory to path for imports
current_dir = os.path.dirname(os.path.abspath(__file__))
src_dir = os.path.join(current_dir, 'src')

if src_dir not in sys.path:
    sys.path.insert(0, src_dir)

from quiz_catalog import QUESTIONS
from content_catalog import build_candidate_pool
from content_scoring import assign_algorithm_variant, recommend_content
from feedback_system import (
    FeedbackLog, feedback_from_recommendation, record_feedback_to_sheet,
    compute_accuracy_report
)
from forum_client import InputError

BUZZ_BADGES = {
    "Trending Positive": "🔥",
    "Trending Negative": "👎",
    "Trending Mixed": "🌗",
    "Controversial": "⚡",
    "Popular Discussion": "💬",
    "Niche Interest": "🔎",
    "Low Buzz": "💤"
}

# =============================================================================
# SESSION STATE MANAGEMENT
# =============================================================================

def initialize_session_state():
    """Initialize all required session state variables."""

    # Quiz answers and results
    if "answers" not in st.session_state:
        st.session_state.answers = {}

    if "recommendations" not in st.session_state:
        st.session_state.recommendations = []

    # Feedback tracking
    if "feedback_given" not in st.session_state:
        st.session_state.feedback_given = {}

    # Caches
    if "signal_cache" not in st.session_state:
        st.session_state.signal_cache = {}

    if "detail_cache" not in st.session_state:
        st.session_state.detail_cache = {}

    # Session ID and A/B bucket
    if "session_id" not in st.session_state:
        st.session_state.session_id = str(uuid.uuid4())

    if "variant" not in st.session_state:
        st.session_state.variant = assign_algorithm_variant(st.session_state.session_id)

    if "feedback_log" not in st.session_state:
        st.session_state.feedback_log = FeedbackLog()

# =============================================================================
# UI STYLING
# =============================================================================

def inject_custom_css():
    """Inject custom CSS for the recommendation cards."""
    st.markdown("""
    <style>
    #MainMenu {visibility: hidden;}
    footer {visibility: hidden;}

    .app-title {
        text-align: center;
        font-size: 2.5rem;
        font-weight: bold;
        color: #e50914;
    }

    .buzz-label {
        font-size: 0.85rem;
        color: #666;
    }

    .reason {
        font-size: 0.85rem;
        line-height: 1.4;
        color: #444;
    }
    </style>
    """, unsafe_allow_html=True)

# =============================================================================
# CORE FUNCTIONS
# =============================================================================

def generate_recommendations(answers):
    """Build the candidate pool and rank it for the current session's variant."""
    candidates = build_candidate_pool(answers, detail_cache=st.session_state.detail_cache)
    if not candidates:
        return []
    return recommend_content(
        answers,
        candidates,
        st.session_state.variant,
        signal_cache=st.session_state.signal_cache
    )


def record_feedback(scored, verdict):
    """Log a like/dislike locally and mirror it to Google Sheets when configured."""
    item = feedback_from_recommendation(scored, verdict)
    st.session_state.feedback_log.append(item)
    record_feedback_to_sheet(item, st.session_state.session_id)
    st.session_state.feedback_given[scored.content.id] = verdict

# =============================================================================
# UI COMPONENTS
# =============================================================================

def render_quiz():
    """Render the quiz form; returns answers when submitted."""
    with st.form("quiz"):
        answers = {}
        for question in QUESTIONS:
            labels = [label for label, _ in question["options"]]
            values = dict(question["options"])
            if question["multi_select"]:
                picked = st.multiselect(question["text"], labels, key=f"q_{question['id']}")
                if picked:
                    answers[question["id"]] = [values[label] for label in picked]
            else:
                picked = st.radio(question["text"], labels, key=f"q_{question['id']}")
                answers[question["id"]] = values[picked]

        if st.form_submit_button("🎯 Find something to watch", type="primary"):
            return answers
    return None


def render_recommendation(scored):
    """Render one recommendation card with buzz and feedback buttons."""
    content = scored.content
    social = content.social_signal

    st.markdown(f"**#{scored.rank} {content.title}**"
                + (f" ({content.release_year})" if content.release_year else ""))
    st.caption(f"{', '.join(content.genres)} · score {scored.score:.1f}")

    if social is not None:
        badge = BUZZ_BADGES.get(social.buzz, "")
        st.markdown(f'<div class="buzz-label">{badge} {social.buzz} · '
                    f'{social.comment_volume} comments · sentiment {social.sentiment}</div>',
                    unsafe_allow_html=True)
        if social.trending_topics:
            st.caption("Trending: " + ", ".join(t.term for t in social.trending_topics[:5]))

    for reason in scored.reasons:
        st.markdown(f'<div class="reason">• {reason}</div>', unsafe_allow_html=True)

    feedback = st.session_state.feedback_given.get(content.id)
    col1, col2 = st.columns(2)
    with col1:
        if st.button("👍", key=f"like_{content.id}",
                     type="primary" if feedback == "liked" else "secondary"):
            record_feedback(scored, "liked")
            st.rerun()
    with col2:
        if st.button("👎", key=f"dislike_{content.id}",
                     type="primary" if feedback == "disliked" else "secondary"):
            record_feedback(scored, "disliked")
            st.rerun()


def render_recommendations():
    """Render the ranked list in rows of five."""
    recommendations = st.session_state.recommendations
    if not recommendations:
        return

    st.markdown("### 🎬 Your picks")
    for start in range(0, len(recommendations), 5):
        cols = st.columns(5)
        for col, scored in zip(cols, recommendations[start:start + 5]):
            with col:
                render_recommendation(scored)


def render_analytics():
    """Render accuracy by algorithm variant and genre."""
    report = compute_accuracy_report(st.session_state.feedback_log.load())

    with st.expander("📊 Recommendation accuracy"):
        overall = report.overall
        st.metric("Overall accuracy", f"{overall.accuracy:.1f}%", help=f"{overall.total} ratings")
        st.metric("Top-3 accuracy", f"{overall.top_pick_accuracy:.1f}%")

        cols = st.columns(len(report.by_variant))
        for col, (variant, stats) in zip(cols, report.by_variant.items()):
            with col:
                st.markdown(f"**Algorithm {variant}**")
                st.write(f"{stats.liked} liked / {stats.disliked} disliked")
                st.write(f"Accuracy: {stats.accuracy:.1f}% · Top-3: {stats.top_pick_accuracy:.1f}%")

        if report.by_genre:
            st.markdown("**By genre**")
            st.table([
                {"Genre": genre, "Liked": s.liked, "Disliked": s.disliked,
                 "Total": s.total, "Accuracy": f"{s.accuracy:.1f}%"}
                for genre, s in report.by_genre.items()
            ])

        if st.button("Reset analytics"):
            st.session_state.feedback_log.clear()
            st.session_state.feedback_given = {}
            st.rerun()

# =============================================================================
# MAIN APPLICATION
# =============================================================================

def main():
    """Main application function."""
    st.set_page_config(
        page_title="What2Watch",
        page_icon="🎬",
        layout="wide",
        initial_sidebar_state="collapsed"
    )

    initialize_session_state()
    inject_custom_css()

    st.markdown('<h1 class="app-title">🎬 What2Watch</h1>', unsafe_allow_html=True)

    answers = render_quiz()
    if answers is not None:
        try:
            with st.spinner("🎯 Reading the room on Reddit..."):
                st.session_state.answers = answers
                st.session_state.recommendations = generate_recommendations(answers)
                st.session_state.feedback_given = {}
        except InputError as e:
            st.error(f"Please check your answers: {e}")
        if not st.session_state.recommendations:
            st.warning("No titles matched those answers. Try loosening the filters.")

    render_recommendations()
    render_analytics()

if __name__ == "__main__":
    main()
