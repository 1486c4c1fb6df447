# Copyright lowRISC contributors.
# Licensed under the Apache License, Version 2.0, see LICENSE for details.
# SPDX-License-Identifier: Apache-2.0

"""Extra C++ sources for the Verilator harness, listed in a Bender.yml."""

import logging
from pathlib import Path
from typing import List

from .errors import ConfigException
from .scripts_lib import read_yaml

logger = logging.getLogger(__name__)


def get_cpp_sources(bender_yaml_path, target: str) -> List[Path]:
    '''Return the absolute paths listed under sources.<target>

    Relative entries are resolved against the manifest's own directory. A
    target that isn't listed gives an empty list.
    '''
    bender_file = Path(bender_yaml_path).resolve()
    if not bender_file.is_file():
        raise ConfigException(f'Manifest {bender_file} does not exist')

    bender_data = read_yaml(bender_file) or {}
    if not isinstance(bender_data, dict):
        raise ConfigException(f'Manifest {bender_file} is not a mapping')

    cpp_sources = bender_data.get("sources") or {}
    rel_paths = cpp_sources.get(target, [])
    if not rel_paths:
        logger.info(f"No C++ sources for target {target!r} in {bender_file}")
        return []

    if not isinstance(rel_paths, list):
        raise ConfigException(f'sources.{target} in {bender_file} must be '
                              'a list of paths')

    bender_dir = bender_file.parent
    return [(bender_dir / rel_path).resolve() for rel_path in rel_paths]
