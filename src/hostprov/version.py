import os
import subprocess

# This variable is intended to be overwritten during the build/release process
__version__ = "0.1.0"


def get_version() -> str:
    """
    Returns the current version of the application.
    HOSTPROV_VERSION overrides the packaged version; inside a git checkout the
    short commit hash is appended.
    """
    if os.getenv("HOSTPROV_VERSION"):
        return os.environ["HOSTPROV_VERSION"]

    try:
        cmd = ["git", "rev-parse", "--short", "HEAD"]
        result = subprocess.run(cmd, capture_output=True, text=True, check=True,
                                cwd=os.path.dirname(os.path.abspath(__file__)))
        return f"{__version__}+{result.stdout.strip()}"
    except (subprocess.CalledProcessError, FileNotFoundError):
        pass

    return __version__
