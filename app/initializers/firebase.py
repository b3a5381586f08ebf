import json
import logging
import os

import firebase_admin
from firebase_admin import credentials


logger = logging.getLogger(__name__)


def initialize_firebase():
    """Initializes the Firebase app used for token verification, once per process"""
    if firebase_admin._apps:
        return

    cred_value = os.getenv("GOOGLE_APPLICATION_CREDENTIALS", "firebase_key.json")

    if os.path.exists(cred_value):
        cred = credentials.Certificate(cred_value)
    else:
        try:
            # Inline JSON content from a secret
            cred = credentials.Certificate(json.loads(cred_value))
        except json.JSONDecodeError:
            logger.warning("No service account key found, using application default credentials")
            cred = credentials.ApplicationDefault()

    firebase_admin.initialize_app(cred)
    logger.info("Firebase app initialized")
