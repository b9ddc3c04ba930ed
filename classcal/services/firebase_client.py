"""Firebase Admin bootstrap for the Realtime Database."""

import json
import logging

import firebase_admin
import streamlit as st
from firebase_admin import credentials, db

from classcal.config import CLASSES_PATH

_LOG = logging.getLogger(__name__)


@st.cache_resource
def get_firebase_app() -> firebase_admin.App:
    """Initialise the default Firebase app once per process."""

    if firebase_admin._apps:  # guard against re-init
        return firebase_admin.get_app()

    cred_dict = st.secrets["FIREBASE_CREDENTIALS"]
    if isinstance(cred_dict, str):
        cred_dict = json.loads(cred_dict)

    app = firebase_admin.initialize_app(
        credentials.Certificate(dict(cred_dict)),
        {"databaseURL": st.secrets["FIREBASE_DATABASE_URL"]},
    )
    _LOG.info("Firebase app initialised for %s", st.secrets["FIREBASE_DATABASE_URL"])
    return app


def get_classes_reference() -> db.Reference:
    return db.reference(f"/{CLASSES_PATH}", app=get_firebase_app())
