from __future__ import annotations

import importlib
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
for p in (REPO_ROOT, REPO_ROOT / "src" / "school_portal"):
    if str(p) not in sys.path:
        sys.path.insert(0, str(p))

from config import get_settings_module

from school_portal.container import build_firestore_container
from school_portal.database.bootstrap import ensure_admin_user


def main() -> None:
    load_dotenv(override=False)
    logging.basicConfig(level=logging.INFO, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    settings = importlib.import_module(get_settings_module())
    firebase_config = dict(settings.FIREBASE_CONFIG)
    container = build_firestore_container(firebase_config=firebase_config)

    uid = ensure_admin_user(container.users_repo, container.user_service)
    if uid:
        print(f"OK: Seeded admin account -> {uid} (project={firebase_config.get('project_id') or '<default>'})")
    else:
        print("OK: Nothing to seed")


if __name__ == "__main__":
    main()
