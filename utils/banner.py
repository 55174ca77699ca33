import os
import subprocess
from datetime import datetime

# Global flag to ensure banner is only shown once
_banner_shown = False

def get_git_info():
    """Get git commit hash and commit date"""
    try:
        git_hash = subprocess.check_output(['git', 'rev-parse', 'HEAD'],
                                           stderr=subprocess.DEVNULL).decode().strip()[:8]
        git_date = subprocess.check_output(['git', 'show', '-s', '--format=%ci', 'HEAD'],
                                           stderr=subprocess.DEVNULL).decode().strip()
        return git_hash, git_date
    except (subprocess.CalledProcessError, FileNotFoundError):
        return "unknown", "unknown"

def get_build_info():
    """Build time and git hash baked in by the container build, if any"""
    build_time = os.environ.get('BUILD_TIME')
    if build_time is None:
        build_time = datetime.utcnow().strftime('%Y-%m-%d %H:%M:%S UTC')
    return build_time, os.environ.get('GIT_HASH')

def print_startup_banner():
    """Print the startup banner once per process"""
    global _banner_shown

    if _banner_shown:
        return
    _banner_shown = True

    git_hash, git_date = get_git_info()
    build_time, git_hash_env = get_build_info()
    display_hash = git_hash_env[:8] if git_hash_env else git_hash

    banner = r"""
  _                              _       _ _
 | |_ ___  __ _ _ __ ___        (_) ___ (_) |_ __
 | __/ _ \/ _` | '_ ` _ \ _____ | |/ _ \| | | '_ \
 | ||  __/ (_| | | | | | |_____|| | (_) | | | | | |
  \__\___|\__,_|_| |_| |_|     _/ |\___/|_|_|_| |_|
                              |__/
    """

    print("\033[96m" + banner + "\033[0m")
    print("\033[94m" + "=" * 60 + "\033[0m")
    print(f"   Build Time: {build_time}")
    print(f"   Git Hash:   {display_hash}")
    if git_date != "unknown":
        print(f"   Git Date:   {git_date}")
    print("\033[94m" + "=" * 60 + "\033[0m")
    print("\033[93mStarting Team Invitations Service...\033[0m")
    print()
