"""
Feedback spreadsheet upload widget.

One-shot: pick a file, press Upload, get the record count or the server's
error message. No retry.
"""

import logging

import streamlit as st

from api.client import UPLOAD_EXTENSIONS, ApiError, FeedbackApiClient

log = logging.getLogger(__name__)


def upload_widget(client: FeedbackApiClient, key: str = "upload") -> None:
    uploaded = st.file_uploader(
        "Upload File 📁",
        type=sorted(UPLOAD_EXTENSIONS),
        key=f"{key}_file",
        help="CSV or Excel export of the feedback form",
    )
    clicked = st.button("Upload", key=f"{key}_button", disabled=uploaded is None)
    if not clicked or uploaded is None:
        return

    with st.spinner("Uploading…"):
        try:
            result = client.upload(uploaded.getvalue(), uploaded.name)
        except ValueError as exc:
            st.error(f"Error: {exc}")
            return
        except ApiError as exc:
            log.error("Upload error: %s", exc.message)
            st.error(f"Upload failed: {exc.message}")
            return

    st.success(f"Success! Uploaded {result.count} records to course feedback database.")
