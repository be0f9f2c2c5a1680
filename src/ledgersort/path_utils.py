"""
Path resolution helpers for settings entries.

Relative paths in settings.yaml are relative to the project directory,
which is the parent of the config directory.
"""

import glob
import os


def project_dir(config_dir):
    return os.path.dirname(os.path.abspath(config_dir))


def resolve_path(config_dir, path_spec):
    """Expand ~ and $VARS and make a settings path absolute."""
    path = os.path.expandvars(os.path.expanduser(str(path_spec)))
    if not os.path.isabs(path):
        path = os.path.join(project_dir(config_dir), path)
    return os.path.normpath(path)


def resolve_data_source_paths(config_dir, file_spec):
    """Turn a data source 'file' entry into the statement files it names.

    The entry may be one file, a folder (its top-level *.csv files are
    used), or a glob pattern (** recurses).

    Returns:
        (paths, kind) where kind is 'file', 'dir', 'glob' or 'missing'
    """
    if not file_spec:
        return [], 'missing'

    spec = resolve_path(config_dir, file_spec)

    if glob.has_magic(spec):
        found = {os.path.normpath(p) for p in glob.glob(spec, recursive=True) if os.path.isfile(p)}
        return sorted(found), 'glob'

    if os.path.isdir(spec):
        csv_files = [
            os.path.join(spec, name) for name in os.listdir(spec)
            if name.lower().endswith('.csv') and os.path.isfile(os.path.join(spec, name))
        ]
        return sorted(csv_files), 'dir'

    if os.path.isfile(spec):
        return [spec], 'file'

    return [], 'missing'
