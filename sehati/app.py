"""Streamlit browser UI.

Run with ``sehati web`` or ``streamlit run sehati/app.py -- --config FILE``.
"""

from __future__ import annotations

import argparse
import asyncio
import hashlib
import html
import re
import sys
from typing import MutableMapping

import streamlit as st
from dotenv import load_dotenv

from sehati.config import configure_logging, load_config
from sehati.render import (
    SAFE_ALLERGENS_TEXT,
    allergen_display,
    format_timestamp,
    grade_color,
    nutrition_tiles,
)
from sehati.session import ScanSession

_MARKDOWN_SPECIAL = re.compile(r"([\\`*_{}\[\]()#+\-.!<>|~])")


def _get_session() -> ScanSession:
    if "session" not in st.session_state:
        parser = argparse.ArgumentParser(add_help=False)
        parser.add_argument("--config", "-c", default=None)
        args, _ = parser.parse_known_args(sys.argv[1:])

        load_dotenv()
        config = load_config(args.config)
        configure_logging(config.logging.level)
        st.session_state.session = ScanSession.from_config(config)

    if "show_camera" not in st.session_state:
        st.session_state.show_camera = False
    if "confirm_clear" not in st.session_state:
        st.session_state.confirm_clear = False
    if "input_markers" not in st.session_state:
        st.session_state.input_markers = {}
    return st.session_state.session


def is_new_input(markers: MutableMapping[str, str], widget: str, upload) -> bool:
    """Return True once per file placed in *widget*.

    Widgets keep returning their file on every rerun. Each selection gets
    its own ``file_id``, so picking the same picture again counts as new.
    """
    if upload is None:
        markers.pop(widget, None)
        return False
    marker = getattr(upload, "file_id", None) or hashlib.sha256(upload.getvalue()).hexdigest()
    if markers.get(widget) == marker:
        return False
    markers[widget] = marker
    return True


def md_escape(text: str) -> str:
    return _MARKDOWN_SPECIAL.sub(r"\\\1", text)


def grade_badge(grade: str, size: int = 64) -> str:
    return (
        f"<div style='width:{size}px;height:{size}px;border-radius:14px;"
        f"background:{grade_color(grade)};color:#0F0F0F;display:flex;"
        f"align-items:center;justify-content:center;font-weight:900;"
        f"font-size:{size // 2}px'>{html.escape(grade or '?')}</div>"
    )


def render_capture(session: ScanSession) -> None:
    state = session.state
    markers = st.session_state.input_markers
    left, right = st.columns(2)

    with left:
        if st.session_state.show_camera:
            shot = st.camera_input("التقاط", label_visibility="collapsed")
            if is_new_input(markers, "camera", shot):
                session.accept_camera_still(shot.getvalue(), shot.type or "image/jpeg")
                st.session_state.show_camera = False
                st.rerun()
            if st.button("إلغاء", key="cancel_camera"):
                st.session_state.show_camera = False
                st.rerun()
        elif state.image is not None:
            st.image(state.image.data, use_container_width=True)
            if st.button("✕", key="clear_image", disabled=state.analyzing, help="إزالة الصورة"):
                session.clear_image()
                st.rerun()
        else:
            st.markdown("**ارفع صورة المنتج**")
            st.caption("قم بتصوير جدول الحقائق الغذائية بوضوح")

    with right:
        st.subheader("ابدأ الفحص")
        if st.button("📷 استخدام الكاميرا", key="use_camera", use_container_width=True):
            st.session_state.show_camera = True
            st.rerun()

        upload = st.file_uploader(
            "اختيار من الاستوديو",
            type=["jpg", "jpeg", "png", "webp", "gif", "bmp"],
        )
        if is_new_input(markers, "upload", upload):
            asyncio.run(session.upload_bytes(upload.getvalue(), upload.type))
            st.rerun()

        if state.image is not None:
            label = "جاري التحليل..." if state.analyzing else "تحليل المنتج الآن"
            if st.button(
                label,
                key="analyze",
                type="primary",
                disabled=not session.can_analyze,
                use_container_width=True,
            ):
                with st.spinner("جاري تحليل البيانات..."):
                    asyncio.run(session.analyze())
                st.rerun()


def render_result(session: ScanSession) -> None:
    result = session.state.result
    if result is None:
        return

    head, badge = st.columns([4, 1])
    with head:
        st.header(md_escape(result.product_name))
        st.write(md_escape(result.health_summary))
    with badge:
        st.caption("التقييم الصحي")
        st.markdown(grade_badge(result.health_grade, 80), unsafe_allow_html=True)

    for col, (label, value, unit) in zip(st.columns(5), nutrition_tiles(result)):
        col.metric(label, f"{value} {unit}")

    st.subheader("الحساسية")
    allergens = allergen_display(result)
    if allergens:
        st.warning(md_escape("، ".join(allergens)))
    else:
        st.caption(SAFE_ALLERGENS_TEXT)

    st.subheader("قائمة المكونات")
    st.write(md_escape("، ".join(result.ingredients)))


def render_history(session: ScanSession) -> None:
    history = session.history
    if not len(history):
        return

    st.divider()
    title, clear = st.columns([4, 1])
    title.subheader("سجل عمليات الفحص")
    with clear:
        if st.session_state.get("confirm_clear"):
            st.write("هل تريد مسح السجل؟")
            yes, no = st.columns(2)
            if yes.button("نعم", key="confirm_clear_yes"):
                session.clear_history(lambda: True)
                st.session_state.confirm_clear = False
                st.rerun()
            if no.button("لا", key="confirm_clear_no"):
                st.session_state.confirm_clear = False
                st.rerun()
        elif st.button("مسح الكل", key="clear_all"):
            st.session_state.confirm_clear = True
            st.rerun()

    for idx, item in enumerate(history.entries):
        badge, info, view, delete = st.columns([1, 6, 1, 1])
        badge.markdown(grade_badge(item.health_grade, 44), unsafe_allow_html=True)
        info.markdown(
            f"**{md_escape(item.product_name)}**  \n{format_timestamp(item.timestamp)}"
        )
        if view.button("👁", key=f"view_{idx}"):
            session.select_history(idx)
            st.rerun()
        if delete.button("🗑", key=f"delete_{idx}"):
            session.delete_history_item(idx)
            st.rerun()


def main() -> None:
    st.set_page_config(page_title="صحتي", layout="wide")
    session = _get_session()

    st.title("صحتي")
    st.caption("مستشارك الغذائي الذكي")

    render_capture(session)

    if session.state.error:
        st.error(session.state.error)

    render_result(session)
    render_history(session)


if __name__ == "__main__":
    main()
