#!/usr/bin/env python3
"""Build the DPI library, verilate the test harness, run it and tidy up."""

# Copyright lowRISC contributors.
# Licensed under the Apache License, Version 2.0, see LICENSE for details.
# SPDX-License-Identifier: Apache-2.0

import argparse
import logging
import os
import shutil
import sys
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence, Tuple

from .errors import StepFailed, VtestError
from .scripts_lib import format_to_cmd, pushd, run_one
from .verilator_cmd import (get_build_cmd, get_make_cmd, get_run_cmd,
                            get_verilator_cmd)
from .verilator_manifest import get_cpp_sources
from .vtest_config import DEFAULT_CONFIG_NAME, VtestConfig, load_config

logger = logging.getLogger(__name__)

# What a shell reports when it can't find or execute a command
RET_CANNOT_EXEC = 127


@dataclass
class VtestFlow:
    '''The build -> verilate -> make -> run sequence, followed by cleanup.

    By default the flow stops at the first step with a non-zero return code.
    With keep_going it carries on regardless and reports the first failure
    at the end. Either way, the binary and obj_dir are removed afterwards
    unless keep_artifacts is set.
    '''
    cfg: VtestConfig
    work_dir: str
    verbose: bool = False
    keep_going: bool = False
    skip_build: bool = False
    keep_artifacts: bool = False
    sim_log: Optional[str] = None
    extra_sources: Sequence[str] = ()
    runner: Callable[..., int] = run_one
    failures: List[Tuple[str, int]] = field(default_factory=list)

    def __post_init__(self):
        # Steps run from other directories, so pin relative paths down now.
        self.work_dir = os.path.abspath(self.work_dir)
        if self.sim_log is not None:
            self.sim_log = os.path.abspath(self.sim_log)

    def run(self) -> int:
        '''Run every step, returning the return code of the first failure'''
        self.failures = []
        try:
            self._run_steps()
        except StepFailed as err:
            logger.error(str(err))
            return err.returncode
        finally:
            if self.keep_artifacts:
                logger.info(f"Keeping build artifacts in {self.work_dir}")
            else:
                self.clean()

        if self.failures:
            step, retcode = self.failures[0]
            logger.error(f"{len(self.failures)} step(s) failed, first was "
                         f"{step!r} (return code {retcode})")
            return retcode

        logger.info("All steps passed")
        return 0

    def _run_steps(self) -> None:
        if self.skip_build:
            logger.info("Skipping dependency build")
        else:
            self.run_step('build', get_build_cmd(self.cfg), self.cfg.root)

        self.run_step('verilate',
                      get_verilator_cmd(self.cfg, self.work_dir,
                                        self.extra_sources),
                      self.work_dir)
        self.run_step('make', get_make_cmd(self.cfg), self.work_dir)
        self.run_step('run', get_run_cmd(self.cfg), self.work_dir,
                      redirect_stdstreams=self.sim_log)

    def run_step(self, step: str, cmd: List[str], cwd: str,
                 redirect_stdstreams: Optional[str] = None) -> int:
        '''Run one command from inside cwd

        A directory that can't be entered or a command that can't be started
        counts as a failure with RET_CANNOT_EXEC. Raises StepFailed on a
        non-zero return code unless keep_going is set, in which case the
        failure is recorded and its code returned.
        '''
        logger.info(f"[{step}] in {cwd}: {format_to_cmd(cmd)}")
        try:
            with pushd(cwd):
                retcode = self.runner(self.verbose, cmd,
                                      redirect_stdstreams=redirect_stdstreams)
        except (FileNotFoundError, NotADirectoryError, PermissionError) as err:
            logger.error(f"[{step}] cannot run {cmd[0]!r} in {cwd}: {err}")
            retcode = RET_CANNOT_EXEC

        if retcode < 0:
            # Killed by a signal. Report it the way a shell would.
            retcode = 128 - retcode

        if retcode == 0:
            return retcode

        if not self.keep_going:
            raise StepFailed(step, retcode)

        logger.warning(f"[{step}] returned {retcode}, carrying on")
        self.failures.append((step, retcode))
        return retcode

    def clean(self) -> None:
        '''Remove the binary and the generated build directory, if present

        Behaves like `rm <binary>; rm -rf <obj_dir>`, except that a missing
        binary isn't an error. Symlinks are removed, never followed. A
        directory where the binary should be is left alone, as rm would.
        '''
        binary = os.path.join(self.work_dir, self.cfg.binary)
        obj_dir = os.path.join(self.work_dir, self.cfg.obj_dir)

        if os.path.islink(binary) or os.path.isfile(binary):
            logger.debug(f"Removing {binary}")
            os.remove(binary)
        elif os.path.isdir(binary):
            logger.warning(f"Not removing {binary}: it is a directory")

        if os.path.islink(obj_dir):
            logger.debug(f"Removing symlink {obj_dir}")
            os.remove(obj_dir)
        elif os.path.isdir(obj_dir):
            logger.debug(f"Removing {obj_dir}")
            shutil.rmtree(obj_dir)
        elif os.path.lexists(obj_dir):
            logger.debug(f"Removing {obj_dir}")
            os.remove(obj_dir)


def positive_int(arg: str) -> int:
    '''Read a value for --jobs'''
    try:
        value = int(arg, 10)
    except ValueError:
        value = 0
    if value < 1:
        raise argparse.ArgumentTypeError(f'Bad job count ({arg}): '
                                         'should be a positive integer.')
    return value


def parse_args(argv: Optional[List[str]] = None):
    '''Parse the command line, returning (args, sim_args)

    Anything after a lone '--' is passed through to the simulation binary.
    '''
    if argv is None:
        argv = sys.argv[1:]
    sim_args = []
    if '--' in argv:
        idx = argv.index('--')
        argv, sim_args = argv[:idx], argv[idx + 1:]

    parser = argparse.ArgumentParser(
        description='Build the DPI library, verilate and run the test '
                    'harness, then remove the build artifacts.')
    parser.add_argument('config_name', nargs='?', default=DEFAULT_CONFIG_NAME,
                        help='Named configuration to use (default: '
                             '%(default)s)')
    parser.add_argument('--config-filename',
                        help='Config file to read (default: $VTEST_CONFIG_FILE '
                             'or vtest_configs.hjson in the work directory)')
    parser.add_argument('--work-dir', default=os.getcwd(),
                        help='Directory holding the harness sources '
                             '(default: current directory)')
    parser.add_argument('--verbose', '-v', action='store_true')
    parser.add_argument('--keep-going', '-k', action='store_true',
                        help='Run every step even if an earlier one failed')
    parser.add_argument('--skip-build', action='store_true',
                        help="Don't run the dependency build script")
    parser.add_argument('--keep-artifacts', action='store_true',
                        help="Don't remove the binary and obj_dir afterwards")
    parser.add_argument('--sim-log',
                        help='Redirect the simulation output to this file')
    parser.add_argument('--cpp-manifest',
                        help='Bender.yml listing extra C++ sources')
    parser.add_argument('--cpp-target',
                        help='Target in the manifest to take sources from')
    parser.add_argument('--jobs', '-j', type=positive_int,
                        help='Parallel jobs for make')

    args = parser.parse_args(argv)
    if args.cpp_manifest is not None and args.cpp_target is None:
        parser.error('--cpp-manifest needs --cpp-target')

    return args, sim_args


def _main(argv: Optional[List[str]] = None, flow_class=VtestFlow) -> int:
    args, sim_args = parse_args(argv)

    logging.basicConfig(format='%(levelname)s: %(message)s')
    logging.getLogger().setLevel(logging.DEBUG if args.verbose
                                 else logging.INFO)

    work_dir = os.path.abspath(args.work_dir)
    cfg = load_config(args.config_name, work_dir, args.config_filename)
    if args.jobs is not None:
        cfg.make_jobs = args.jobs
    cfg.sim_args = cfg.sim_args + sim_args

    extra_sources = []
    if args.cpp_manifest is not None:
        extra_sources = get_cpp_sources(args.cpp_manifest, args.cpp_target)

    flow = flow_class(cfg=cfg,
                      work_dir=work_dir,
                      verbose=args.verbose,
                      keep_going=args.keep_going,
                      skip_build=args.skip_build,
                      keep_artifacts=args.keep_artifacts,
                      sim_log=args.sim_log,
                      extra_sources=extra_sources)
    return flow.run()


def main(argv: Optional[List[str]] = None, flow_class=VtestFlow) -> int:
    '''Entry point for the vtest console script'''
    try:
        return _main(argv, flow_class)
    except VtestError as err:
        sys.stderr.write('Error: {}\n'.format(err))
        return 1


if __name__ == '__main__':
    sys.exit(main())
