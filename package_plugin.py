#!/usr/bin/env python
# -*- coding: utf-8 -*-
"""
Build release/side_mdinf_tool_<version>.zip for the QGIS plugin manager.

    python package_plugin.py
"""

import os
import sys
import zipfile

PLUGIN_PACKAGE = 'side_mdinf_tool'

SKIP_DIRS = {'__pycache__', 'tests'}
SKIP_SUFFIXES = ('.pyc', '.pyo', '.zip', '.log')


def get_version_from_metadata(plugin_dir):
    """Version field of metadata.txt, '0.0.0' if it cannot be read."""
    try:
        with open(os.path.join(plugin_dir, 'metadata.txt'), encoding='utf-8') as f:
            for line in f:
                key, _, value = line.partition('=')
                if key.strip() == 'version':
                    return value.strip()
    except OSError as e:
        print(f"Warning: metadata.txt not readable ({e})")
    return '0.0.0'


def iter_plugin_files(plugin_dir):
    """Yield (path, archive name) for every file shipped with the plugin."""
    for root, dirs, files in os.walk(plugin_dir):
        dirs[:] = sorted(d for d in dirs if d not in SKIP_DIRS and not d.startswith('.'))
        for name in sorted(files):
            if name.startswith('.') or name.endswith(SKIP_SUFFIXES):
                continue
            path = os.path.join(root, name)
            # The plugin manager unpacks into a folder named after the archive root
            yield path, os.path.join(PLUGIN_PACKAGE, os.path.relpath(path, plugin_dir))


def package_plugin(repo_dir=None):
    """Write the release archive and return its path."""
    repo_dir = repo_dir or os.path.dirname(os.path.abspath(__file__))
    plugin_dir = os.path.join(repo_dir, PLUGIN_PACKAGE)
    version = get_version_from_metadata(plugin_dir)

    release_dir = os.path.join(repo_dir, 'release')
    os.makedirs(release_dir, exist_ok=True)
    zip_path = os.path.join(release_dir, f"{PLUGIN_PACKAGE}_{version}.zip")

    count = 0
    with zipfile.ZipFile(zip_path, 'w', zipfile.ZIP_DEFLATED) as archive:
        for path, arcname in iter_plugin_files(plugin_dir):
            archive.write(path, arcname)
            count += 1

    print(f"{PLUGIN_PACKAGE} {version}: {count} files -> {zip_path} "
          f"({os.path.getsize(zip_path) / 1024:.1f} KB)")
    return zip_path


if __name__ == '__main__':
    try:
        package_plugin()
    except OSError as e:
        print(f"ERROR: {e}")
        sys.exit(1)
