"""Interactive segmentation page: click points, preview the mask, cut it out."""

from io import BytesIO

import streamlit as st
from PIL import Image

from samcut_frontend.api import (
    ApiError,
    clear_points,
    create_session,
    fetch_cutout,
    fetch_preview,
    fetch_session,
    load_example_image,
    reset_session,
    send_click,
    upload_image,
)
from samcut_frontend.components.point_annotator import point_annotator, scale_to_width
from samcut_frontend.constants import COLOR_NEGATIVE_POINT, COLOR_POSITIVE_POINT, DISPLAY_WIDTH
from samcut_frontend.models import PointLabel, SessionState

CUTOUT_FILENAME = "cut-image.png"

# The image component reports clicks only, so there is no hover preview here
INSTRUCTIONS = (
    "Click on the image to place points; each click refines the mask.",
    "Green = positive (include), Red = negative (exclude).",
    "The mask updates on click. Hover preview is only available through the API.",
    "Use Cut mask to download the selection with a transparent background.",
)


def _init_session_state() -> None:
    """Initialize session state for the segmentation page."""
    if "segment_session_id" not in st.session_state:
        st.session_state.segment_session_id = None
    if "point_is_positive" not in st.session_state:
        st.session_state.point_is_positive = True


def _ensure_session() -> dict | None:
    """Return the current backend session, creating one if needed."""
    session_id = st.session_state.segment_session_id
    if session_id:
        session = fetch_session(session_id)
        if session is not None:
            return session

    try:
        session = create_session()
    except ApiError as e:
        st.error(f"Failed to start a segmentation session: {e}")
        return None

    st.session_state.segment_session_id = session["id"]
    return session


def _render_image_source(session_id: str) -> None:
    """Render upload and example controls."""
    st.subheader("Image")

    uploaded_file = st.file_uploader(
        "Click to upload image",
        type=["jpg", "jpeg", "png", "gif", "bmp", "webp"],
        key="segment_uploader",
    )

    if uploaded_file and st.button("Segment this image", type="primary", key="segment_upload_btn"):
        with st.spinner("Extracting image embedding..."):
            try:
                upload_image(session_id, uploaded_file.name, uploaded_file.getvalue(), uploaded_file.type)
            except ApiError as e:
                st.error(str(e))
                return
        st.rerun()

    if st.button("(or try example)", key="segment_example_btn"):
        with st.spinner("Extracting image embedding..."):
            try:
                load_example_image(session_id)
            except ApiError as e:
                st.error(str(e))
                return
        st.rerun()


def _render_point_type_sidebar() -> bool:
    """Render point type controls in sidebar.

    Returns True for positive, False for negative.
    """
    st.subheader("Point Type")

    point_type = st.radio(
        "Type",
        options=["+ Positive (include)", "- Negative (exclude)"],
        index=0 if st.session_state.point_is_positive else 1,
        key="segment_point_type_radio",
        label_visibility="collapsed",
    )

    st.session_state.point_is_positive = point_type == "+ Positive (include)"
    return st.session_state.point_is_positive


def _render_point_stats(points: list[dict]) -> None:
    """Render point count statistics."""
    positive_count = sum(1 for p in points if p["label"] == PointLabel.POSITIVE)
    negative_count = len(points) - positive_count

    col1, col2 = st.columns(2)

    with col1:
        st.markdown(
            f"<div style='display: flex; align-items: center; gap: 6px;'>"
            f"<div style='width: 10px; height: 10px; background: {COLOR_POSITIVE_POINT}; "
            f"border-radius: 50%;'></div>"
            f"<span>{positive_count} positive</span></div>",
            unsafe_allow_html=True,
        )

    with col2:
        st.markdown(
            f"<div style='display: flex; align-items: center; gap: 6px;'>"
            f"<div style='width: 10px; height: 10px; background: {COLOR_NEGATIVE_POINT}; "
            f"border-radius: 50%;'></div>"
            f"<span>{negative_count} negative</span></div>",
            unsafe_allow_html=True,
        )


def _render_action_buttons(session: dict) -> None:
    """Render reset, clear and cut buttons."""
    session_id = session["id"]
    st.divider()

    if st.button("Reset image", key="segment_reset_btn"):
        reset_session(session_id)
        st.rerun()

    if st.button("Clear points", key="segment_clear_btn", disabled=not session["points"]):
        clear_points(session_id)
        st.rerun()

    cutout = fetch_cutout(session_id) if session["has_mask"] else None
    st.download_button(
        "Cut mask",
        data=cutout or b"",
        file_name=CUTOUT_FILENAME,
        mime="image/png",
        disabled=cutout is None,
        key="segment_cut_btn",
    )


def _render_instructions() -> None:
    """Render the instructions panel."""
    st.markdown("---")
    st.caption("**Instructions:**")
    for line in INSTRUCTIONS:
        st.caption(line)


def _render_image_annotator(session: dict, is_positive: bool) -> None:
    """Render the preview with the point annotator component."""
    session_id = session["id"]
    preview_data = fetch_preview(session_id)

    if not preview_data:
        st.error("Failed to load image")
        return

    preview = scale_to_width(Image.open(BytesIO(preview_data)), DISPLAY_WIDTH)

    click = point_annotator(
        preview,
        session["points"],
        key=f"segment_annotator_{session_id}",
    )

    if click:
        result = send_click(session_id, click["x"], click["y"], preview.width, preview.height, is_positive)
        if result:
            st.rerun()
        else:
            st.error("Failed to send point")


def render() -> None:
    """Render the segmentation page."""
    _init_session_state()

    st.header("Segment Anything")
    st.caption("Click on the image to segment an object, then cut it out")

    session = _ensure_session()
    if session is None:
        return

    has_image = session["image_width"] is not None and session["state"] != SessionState.IDLE

    main_col, sidebar_col = st.columns([3, 1])

    with sidebar_col:
        _render_image_source(session["id"])

        if has_image:
            st.divider()
            is_positive = _render_point_type_sidebar()
            _render_point_stats(session["points"])
            _render_action_buttons(session)
            _render_instructions()
        else:
            is_positive = st.session_state.point_is_positive

    with main_col:
        if has_image:
            _render_image_annotator(session, is_positive)
        else:
            st.info("Upload an image or try the example to get started.")
        st.caption(session["status"])
