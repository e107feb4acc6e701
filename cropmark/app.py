"""Streamlit Photo Crop & Logo Application

Implements:
 - Batch upload with per-image settings and prev/next navigation
 - Fixed 1080x1350 cover crop, panned by dragging on the preview
 - Optional corner gradient and a logo (bundled or uploaded) in any corner
 - Apply current settings to all images
 - PNG download (single image) or images.zip (batch)
"""

from __future__ import annotations

import logging
from typing import Dict, Optional, Tuple

import streamlit as st
from PIL import Image
from streamlit_drawable_canvas import st_canvas

from cropmark.batch import EditorSession, selection_label
from cropmark.compose import LogoAsset
from cropmark.config import SUPPORTED_IMPORT_EXTS, LogoPosition
from cropmark.export import ExportResult, export_all
from cropmark.imaging import DecodeError, decode_image

PREVIEW_HEIGHT = 640


# ---------------------------- Canvas Helpers ---------------------------- #
def line_endpoints(obj: Dict) -> Optional[Tuple[Tuple[float, float], Tuple[float, float]]]:
    """Start and end points of a fabric.js line object in canvas pixels.

    Line points are stored relative to the object's centre.
    """
    if obj.get("type") != "line":
        return None
    left = obj.get("left", 0)
    top = obj.get("top", 0)
    if obj.get("originX") == "center" and obj.get("originY") == "center":
        cx, cy = left, top
    else:
        cx = left + obj.get("width", 0) * obj.get("scaleX", 1) / 2
        cy = top + obj.get("height", 0) * obj.get("scaleY", 1) / 2
    start = (cx + obj.get("x1", 0), cy + obj.get("y1", 0))
    end = (cx + obj.get("x2", 0), cy + obj.get("y2", 0))
    return start, end


def counter_text(editor: EditorSession) -> str:
    snap = editor.snapshot()
    return snap.counter_label if snap is not None else ""


def download_label(result: ExportResult) -> str:
    if result.is_archive:
        return f"Download {result.name} ({len(result.entries)} images)"
    return f"Download {result.name}"


def preview_size(frame_size: Tuple[int, int], height: int = PREVIEW_HEIGHT) -> Tuple[int, int]:
    W, H = frame_size
    if W <= 0 or H <= 0:
        return 0, 0
    return max(1, int(W * height / H)), height


# ---------------------------- Streamlit UI ---------------------------- #
def init_session_state():  # idempotent
    if "editor" not in st.session_state:
        logo = LogoAsset()
        editor = EditorSession(logo=logo)
        editor.load_logo()
        st.session_state.editor = editor
        st.session_state.logo_asset = logo
    if "upload_sig" not in st.session_state:
        st.session_state.upload_sig = None
    if "logo_sig" not in st.session_state:
        st.session_state.logo_sig = None
    if "pan_seq" not in st.session_state:
        st.session_state.pan_seq = 0
    if "_export" not in st.session_state:
        st.session_state._export = None


def _rerun():
    if hasattr(st, "rerun"):
        st.rerun()
    else:
        getattr(st, "experimental_rerun", lambda: None)()


def sidebar_import_panel():
    editor: EditorSession = st.session_state.editor
    st.sidebar.header("1. Upload")
    uploaded = st.sidebar.file_uploader(
        "Choose one or more photos",
        type=[e[1:] for e in SUPPORTED_IMPORT_EXTS],
        accept_multiple_files=True,
    )
    sig = tuple((uf.name, uf.size) for uf in uploaded) if uploaded else None
    if sig != st.session_state.upload_sig:
        st.session_state.upload_sig = sig
        st.session_state._export = None
        editor.load_batch([(uf.name, uf.getvalue()) for uf in uploaded or []])
        failed = [img.name for img in editor.images if not img.ok]
        if failed:
            st.sidebar.warning("Could not read: " + ", ".join(failed))
    label = selection_label([img.name for img in editor.images])
    if label:
        st.sidebar.caption(label)
    else:
        st.sidebar.info("No photos uploaded yet")


def sidebar_settings():
    editor: EditorSession = st.session_state.editor
    snap = editor.snapshot()
    if snap is None:
        return
    st.sidebar.header("2. Settings")
    keep = st.sidebar.checkbox("Keep original size", value=snap.keep_original)
    if keep != snap.keep_original:
        editor.set_keep_original(keep)
    grad = st.sidebar.checkbox("Add gradient", value=snap.add_gradient)
    if grad != snap.add_gradient:
        editor.set_gradient(grad)
    positions = list(LogoPosition)
    pos = st.sidebar.selectbox(
        "Logo position",
        options=positions,
        index=positions.index(snap.logo_position),
        format_func=lambda p: p.label,
    )
    if pos != snap.logo_position:
        editor.set_logo_position(pos)
    if snap.count > 1:
        if st.sidebar.button("Apply to all"):
            editor.apply_current_to_all()
            st.sidebar.success(f"Applied to {snap.count} images")


def sidebar_logo_panel():
    editor: EditorSession = st.session_state.editor
    st.sidebar.subheader("Logo")
    uploaded = st.sidebar.file_uploader(
        "Custom logo (PNG with transparency works best)",
        type=["png", "webp"],
        key="logo_upload",
    )
    sig = (uploaded.name, uploaded.size) if uploaded else None
    if sig != st.session_state.logo_sig:
        st.session_state.logo_sig = sig
        if uploaded is None:
            st.session_state.logo_asset = LogoAsset().load()
        else:
            try:
                image = decode_image(uploaded.getvalue(), uploaded.name)
                st.session_state.logo_asset = LogoAsset.from_image(image)
            except DecodeError as e:
                st.sidebar.warning(str(e))
    stamp = st.sidebar.checkbox("Stamp logo", value=editor.logo is not None)
    wanted = st.session_state.logo_asset if stamp else None
    if wanted is not editor.logo:
        editor.set_logo(wanted)


def sidebar_export():
    editor: EditorSession = st.session_state.editor
    if not any(img.ok for img in editor.images):
        return
    st.sidebar.header("3. Export")
    if st.sidebar.button("Prepare download"):
        result = export_all(editor)
        st.session_state._export = result
        if result is None:
            st.sidebar.error("Export failed")
        elif result.failed:
            st.sidebar.warning("Failed: " + ", ".join(result.failed))
    result: ExportResult = st.session_state._export
    if result is not None:
        st.sidebar.download_button(
            download_label(result),
            data=result.data,
            file_name=result.name,
            mime=result.mime,
        )


def navigation_bar():
    editor: EditorSession = st.session_state.editor
    if len(editor.images) <= 1:
        return
    c1, c2, c3 = st.columns([1, 3, 1])
    if c1.button("◀ Prev", key="nav_prev"):
        editor.prev()
        _rerun()
    label = counter_text(editor)
    if label:
        c2.markdown(f"**{label}**")
    if c3.button("Next ▶", key="nav_next"):
        editor.next()
        _rerun()


def main_layout():
    st.title("Photo Crop & Logo")
    editor: EditorSession = st.session_state.editor
    if not editor.images:
        st.info("Use the sidebar to upload photos")
        return
    navigation_bar()
    cur = editor.current
    if cur is None or not cur.ok:
        st.warning(f"{cur.name if cur else 'Image'} could not be decoded")
        return
    if editor.surface.image is None:
        editor.request_render()
    frame = editor.surface.image
    W, H = frame.size
    canvas_w, canvas_h = preview_size((W, H))
    display = frame.resize((canvas_w, canvas_h), Image.Resampling.LANCZOS)

    st.caption(f"{cur.name}  ({W}x{H})  - drag on the photo to move the crop")
    canvas_result = st_canvas(
        background_image=display,
        height=canvas_h,
        width=canvas_w,
        drawing_mode="line",
        stroke_width=1,
        stroke_color="rgba(255, 255, 255, 0.6)",
        key=f"pan_canvas_{editor.current_index}_{st.session_state.pan_seq}",
        update_streamlit=True,
    )
    if canvas_result.json_data is not None:
        objs = canvas_result.json_data.get("objects", [])
        points = line_endpoints(objs[-1]) if objs else None
        if points is not None:
            start, end = points
            editor.pan_stroke(start, end, scale_x=W / canvas_w, scale_y=H / canvas_h)
            # fresh canvas so the same stroke is not applied twice
            st.session_state.pan_seq += 1
            _rerun()


def run_app():
    logging.basicConfig(level=logging.INFO)
    init_session_state()
    # Sidebar
    sidebar_import_panel()
    sidebar_settings()
    sidebar_logo_panel()
    sidebar_export()
    # Main layout
    main_layout()


if __name__ == "__main__":
    # Allow running via `streamlit run cropmark/app.py`
    run_app()
