# OPSBOARD/tests/conftest.py : configuration pour les tests

import sys
import os
import tempfile
from pathlib import Path

# Ajoute le dossier parent (package) et le dossier des tests au PYTHONPATH
BASE_DIR = Path(__file__).parent.parent
TESTS_DIR = Path(__file__).parent
sys.path.insert(0, str(BASE_DIR))
sys.path.insert(0, str(TESTS_DIR))

# Doit précéder tout import d'opsboard: la configuration est lue à l'import
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("STORAGE_BACKEND", "local")
os.environ.setdefault("UPLOAD_DIR", tempfile.mkdtemp(prefix="opsboard-uploads-"))
os.environ.setdefault("PUBLIC_BASE_URL", "http://testserver")
