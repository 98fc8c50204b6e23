import os
import sys

# Ensure repository root is on PYTHONPATH for tests
repo_root = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if repo_root not in sys.path:
    sys.path.insert(0, repo_root)

# Keep tests away from a real backend and from the empty-key warning
os.environ.setdefault("SUPABASE_URL", "http://backend.test")
os.environ.setdefault("SUPABASE_ANON_KEY", "test-anon-key")
