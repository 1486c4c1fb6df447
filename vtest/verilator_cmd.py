# Copyright lowRISC contributors.
# Licensed under the Apache License, Version 2.0, see LICENSE for details.
# SPDX-License-Identifier: Apache-2.0

"""Command lines for each step of the simulation flow."""

import os
from typing import Iterable, List

from .vtest_config import VtestConfig


def get_build_cmd(cfg: VtestConfig) -> List[str]:
    '''The dependency build command, to be run from cfg.root'''
    return list(cfg.build_cmd)


def get_verilator_cmd(cfg: VtestConfig,
                      work_dir: str,
                      extra_sources: Iterable[str] = ()) -> List[str]:
    '''Get the verilator command that generates the C++ harness

    The binary is written to <work_dir>/<binary> so that it ends up next to
    the sources rather than inside obj_dir.
    '''
    cmd = ['verilator',
           '--cc', '--exe', '-sv',
           '-o', os.path.join(work_dir, cfg.binary),
           '--vpi',
           '--top-module', cfg.top_module,
           cfg.main_cc]
    cmd += cfg.sources
    cmd += [str(src) for src in extra_sources]
    cmd += ['+incdir+' + incdir for incdir in cfg.incdirs]
    cmd += cfg.libs
    for flag in cfg.cflags:
        cmd += ['-CFLAGS', flag]
    for flag in cfg.ldflags:
        cmd += ['-LDFLAGS', flag]
    cmd += cfg.verilator_args
    return cmd


def get_makefile_name(cfg: VtestConfig) -> str:
    return 'V{}.mk'.format(cfg.top_module)


def get_make_cmd(cfg: VtestConfig) -> List[str]:
    cmd = ['make', '-C', cfg.obj_dir, '-f', get_makefile_name(cfg)]
    if cfg.make_jobs is not None:
        cmd += ['-j', str(cfg.make_jobs)]
    return cmd


def get_run_cmd(cfg: VtestConfig) -> List[str]:
    return ['./' + cfg.binary] + cfg.sim_args
