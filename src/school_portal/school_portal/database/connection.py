from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Optional

import firebase_admin
from firebase_admin import credentials, firestore, storage

logger = logging.getLogger(__name__)


@dataclass
class FirebaseConfig:
    credentials_path: Optional[str]
    project_id: Optional[str]
    storage_bucket: Optional[str]


class FirebaseConnection:
    """Singleton-like handle on the hosted Firebase project.

    Note: The SDK app is initialised lazily on first use so that importing the
    package (and running unit tests) never needs credentials.
    """

    _instance: Optional["FirebaseConnection"] = None

    def __init__(self, config: FirebaseConfig):
        self._config = config
        self._app: Optional[firebase_admin.App] = None

    @classmethod
    def get_instance(cls, config: FirebaseConfig) -> "FirebaseConnection":
        if cls._instance is None:
            cls._instance = FirebaseConnection(config)
        return cls._instance

    def app(self) -> firebase_admin.App:
        if self._app is None:
            if self._config.credentials_path:
                cred = credentials.Certificate(self._config.credentials_path)
            else:
                cred = credentials.ApplicationDefault()

            options: dict[str, Any] = {}
            if self._config.project_id:
                options["projectId"] = self._config.project_id
            if self._config.storage_bucket:
                options["storageBucket"] = self._config.storage_bucket

            self._app = firebase_admin.initialize_app(cred, options)
            logger.info("Firebase app initialised (project=%s)", self._config.project_id or "<default>")
        return self._app

    def client(self):
        return firestore.client(app=self.app())

    def bucket(self):
        return storage.bucket(app=self.app())
