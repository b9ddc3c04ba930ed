"""Cached Google Sheets handles for the ``sheets`` backend."""

import json

import gspread
import streamlit as st
from google.oauth2.service_account import Credentials

from classcal.config import CLASSES_HEADERS, CLASSES_TAB
from classcal.services.sheets_transport import ensure_headers, get_or_create_worksheet

_SCOPES = [
    "https://www.googleapis.com/auth/spreadsheets",
    "https://www.googleapis.com/auth/drive",
]


@st.cache_resource
def get_gsheets_client() -> gspread.Client:
    creds = st.secrets["GOOGLE_SHEETS_CREDENTIALS"]
    if isinstance(creds, str):
        creds = json.loads(creds)
    return gspread.authorize(Credentials.from_service_account_info(dict(creds), scopes=_SCOPES))


@st.cache_resource
def get_classes_worksheet():
    """The Classes tab, created with its header row on first use."""
    sh = get_gsheets_client().open_by_key(st.secrets["GOOGLE_SHEET_ID"])
    ws = get_or_create_worksheet(sh, CLASSES_TAB)
    ensure_headers(ws, CLASSES_HEADERS)
    return ws
