# Copyright lowRISC contributors.
# Licensed under the Apache License, Version 2.0, see LICENSE for details.
# SPDX-License-Identifier: Apache-2.0

import collections.abc
import copy
import logging
import os
from dataclasses import dataclass, field
from typing import Dict, List, Optional, TextIO

import hjson

from .errors import ConfigException
from .scripts_lib import subst_vars

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_FILE = 'vtest_configs.hjson'
DEFAULT_CONFIG_NAME = 'default'

# Values may refer to <work> (the directory the simulation is built in) and
# <root> (the project root). root itself may only refer to <work>.
DEFAULT_PARAMETERS = {
    'root': '<work>/..',
    'build_cmd': ['./build.sh'],
    'top_module': 'TestModule',
    'main_cc': 'verilator_main.cc',
    'sources': ['test.v'],
    'binary': 'test',
    'obj_dir': 'obj_dir',
    'incdirs': ['<root>/vsrc'],
    'libs': ['<root>/target/release/libdpi_memory.1.so'],
    'cflags': ['-DVERILATOR', '-fPIC', '-I<root>/csrc', '-I<work>'],
    'ldflags': ['-Wl,-rpath=<root>/target/release'],
    'verilator_args': [],
    'make_jobs': None,
    'sim_args': [],
}

INT_PARAMETERS = {'make_jobs'}
LIST_PARAMETERS = {k for k, v in DEFAULT_PARAMETERS.items()
                   if isinstance(v, list)}


@dataclass
class VtestConfig:
    root: str
    build_cmd: List[str]
    top_module: str
    main_cc: str
    sources: List[str]
    binary: str
    obj_dir: str
    incdirs: List[str]
    libs: List[str]
    cflags: List[str]
    ldflags: List[str]
    verilator_args: List[str] = field(default_factory=list)
    make_jobs: Optional[int] = None
    sim_args: List[str] = field(default_factory=list)


def _param_type_ok(parameter, value) -> bool:
    if parameter in LIST_PARAMETERS:
        return (isinstance(value, list) and
                all(isinstance(v, str) for v in value))
    if parameter in INT_PARAMETERS:
        return value is None or (isinstance(value, int) and
                                 not isinstance(value, bool))
    return isinstance(value, str)


def verify_config(name, config_dict):
    """Check config_dict matches expectations:
        - It's a mapping object e.g. OrderedDict
        - Every key is a known parameter
        - Values are strings, integers or lists of strings, matching the
          parameter they set"""
    if not isinstance(config_dict, collections.abc.Mapping):
        raise ConfigException('Config ' + name +
                              ' must have dictionary giving parameters')

    for k, v in config_dict.items():
        if k not in DEFAULT_PARAMETERS:
            raise ConfigException('Unknown parameter ' + k + ' in config ' +
                                  name)

        if not _param_type_ok(k, v):
            raise ConfigException('Parameter ' + k + ' for config ' + name +
                                  ' has bad value ' + repr(v))

        if k == 'make_jobs' and v is not None and v < 1:
            raise ConfigException('Parameter make_jobs for config ' + name +
                                  ' must be positive, got ' + str(v))


def get_config_dicts(config_file: TextIO) -> Dict[str, dict]:
    """From a open file config_file extract a dictionary of configuration
    dictionaries

    Throws ConfigException on any error"""
    try:
        config_hjson = hjson.load(config_file)
    except hjson.HjsonDecodeError as e:
        raise ConfigException('Could not decode hjson ' + str(e))

    if not isinstance(config_hjson, collections.abc.Mapping):
        raise ConfigException('Top level of config file must be a dictionary '
                              'of named configs')

    for k, v in config_hjson.items():
        verify_config(k, v)

    return config_hjson


def get_config_file_location():
    """Returns the location of the config file, VTEST_CONFIG_FILE environment
    variable overrides the default"""

    if 'VTEST_CONFIG_FILE' in os.environ:
        return os.environ['VTEST_CONFIG_FILE']

    return DEFAULT_CONFIG_FILE


def resolve_config(params: Dict[str, object], work_dir: str) -> VtestConfig:
    '''Substitute <work> and <root> in params, returning a VtestConfig'''
    root = subst_vars(params['root'], {'work': work_dir})
    # A relative root is relative to the work directory, not the caller's cwd.
    # Absolute roots, including the default <work>/.., are kept as written.
    if not os.path.isabs(root):
        root = os.path.normpath(os.path.join(work_dir, root))
    var_dict = {'work': work_dir, 'root': root}

    resolved = {}
    for name, value in params.items():
        if name == 'root':
            resolved[name] = root
        elif isinstance(value, str):
            resolved[name] = subst_vars(value, var_dict)
        elif isinstance(value, list):
            resolved[name] = [subst_vars(v, var_dict) for v in value]
        else:
            resolved[name] = value

    return VtestConfig(**resolved)


def load_config(name: str,
                work_dir: str,
                config_filename: Optional[str] = None) -> VtestConfig:
    '''Build the VtestConfig for the config called name

    Starts from DEFAULT_PARAMETERS and overlays whatever the config file says
    for name. A missing config file is only allowed for the default config.
    '''
    work_dir = os.path.abspath(work_dir)
    if config_filename is None:
        config_filename = get_config_file_location()
    if not os.path.isabs(config_filename):
        config_filename = os.path.join(work_dir, config_filename)

    params = copy.deepcopy(DEFAULT_PARAMETERS)

    if os.path.exists(config_filename):
        logger.debug(f"Reading configs from {config_filename}")
        with open(config_filename, encoding='UTF-8') as config_file:
            config_dicts = get_config_dicts(config_file)

        if name in config_dicts:
            params.update(config_dicts[name])
        elif name != DEFAULT_CONFIG_NAME:
            raise ConfigException('Configuration ' + name + ' not found in ' +
                                  config_filename)
    elif name != DEFAULT_CONFIG_NAME:
        raise ConfigException('Configuration ' + name + ' requested but ' +
                              config_filename + ' does not exist')
    else:
        logger.debug(f"No config file at {config_filename}, using defaults")

    return resolve_config(params, work_dir)
