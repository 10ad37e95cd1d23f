"""
statter - version detection and version.py __version__ generation

Copyright (c) 2015 Ohmu Ltd
See LICENSE for details
"""

import importlib.util
import os
import subprocess


def save_version(new_ver, old_ver, version_file):
    if not new_ver:
        return False
    version_file = os.path.join(os.path.dirname(__file__), version_file)
    if not old_ver or new_ver != old_ver:
        with open(version_file, "w") as fp:
            fp.write("__version__ = '{}'\n".format(new_ver))
    return True


def read_file_version(version_file):
    module_spec = importlib.util.spec_from_file_location("verfile", version_file)
    module = importlib.util.module_from_spec(module_spec)
    module_spec.loader.exec_module(module)
    return module.__version__


def get_project_version(version_file):
    version_file = os.path.join(os.path.dirname(os.path.realpath(__file__)), version_file)
    try:
        file_ver = read_file_version(version_file)
    except (IOError, AttributeError):
        file_ver = None

    try:
        git_out = subprocess.check_output(["git", "describe", "--always", "--tags"],
                                          cwd=os.path.dirname(version_file),
                                          stderr=subprocess.DEVNULL)
    except (OSError, subprocess.CalledProcessError):
        pass
    else:
        git_ver = git_out.splitlines()[0].strip().decode("utf-8")
        # a bare commit hash is not a version
        if "." in git_ver and save_version(git_ver, file_ver, version_file):
            return git_ver

    if not file_ver:
        raise Exception("version not available from git or from file {!r}".format(version_file))

    return file_ver


if __name__ == "__main__":
    import sys
    get_project_version(sys.argv[1])
