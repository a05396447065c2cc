import os, sys
import warnings
from pathlib import Path

ROOT = Path(__file__).resolve().parent.parent

# Package sources and the shared fakes module
sys.path.insert(0, str(ROOT / "src"))
sys.path.insert(0, str(Path(__file__).resolve().parent))

# Required by cloak.config at import time
os.environ.setdefault("DISCORD_TOKEN", "test-token")
# Keep a developer's local config.toml out of the test run
os.environ.setdefault("CLOAK_CONFIG", str(ROOT / "tests" / "no-config.toml"))
os.environ.setdefault("CLOAK_DB_PATH", ":memory:")

# Silence deprecation warnings surfaced from third-party dependencies during tests
warnings.filterwarnings(
    "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
)
warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)


def pytest_configure(config):
    warnings.filterwarnings(
        "ignore", category=DeprecationWarning, module=r"^discord\\.player$"
    )
    warnings.filterwarnings("ignore", "'audioop' is deprecated", DeprecationWarning)
