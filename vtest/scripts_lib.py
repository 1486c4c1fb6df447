# Copyright lowRISC contributors.
# Licensed under the Apache License, Version 2.0, see LICENSE for details.
# SPDX-License-Identifier: Apache-2.0

import contextlib
import os
import shlex
import subprocess
import sys
from typing import BinaryIO, Dict, Iterator, List, Optional, Union

import yaml

StdStreamDest = Union[str, BinaryIO]


def format_to_cmd(cmd: List[str]) -> str:
    '''Render an argv list as a string that a shell would split back into cmd'''
    return ' '.join(shlex.quote(str(w)) for w in cmd)


def run_one(verbose: bool,
            cmd: List[str],
            redirect_stdstreams: Optional[StdStreamDest] = None) -> int:
    '''Run a command, returning its return code

    If verbose is true, print the command to stderr first (a bit like bash -x).

    If redirect_stdstreams is a path, redirect the stdout and stderr of the
    subprocess to that file. It may also be a file object opened for binary
    writing, in which case the caller keeps ownership of it.

    '''
    if verbose:
        # The equivalent of bash -x
        cmd_str = format_to_cmd(cmd)
        if isinstance(redirect_stdstreams, str):
            cmd_str += f' >{shlex.quote(redirect_stdstreams)} 2>&1'

        print('+ ' + cmd_str, file=sys.stderr)

    stdstream_dest = None
    needs_closing = False
    if redirect_stdstreams is not None:
        if redirect_stdstreams == '/dev/null':
            stdstream_dest = subprocess.DEVNULL
        elif isinstance(redirect_stdstreams, str):
            stdstream_dest = open(redirect_stdstreams, 'wb')
            needs_closing = True
        else:
            stdstream_dest = redirect_stdstreams

    try:
        # Passing close_fds=False ensures that if cmd is a call to Make then
        # we'll pass through the jobserver fds. If you don't do this, you get a
        # warning starting "warning: jobserver unavailable".
        return subprocess.run(cmd,
                              stdout=stdstream_dest,
                              stderr=stdstream_dest,
                              close_fds=False).returncode
    finally:
        if needs_closing:
            stdstream_dest.close()


def subst_vars(string: str, var_dict: Dict[str, str]) -> str:
    '''Apply substitutions in var_dict to string

    If var_dict[K] = V, then <K> will be replaced with V in string.'''
    for key, value in var_dict.items():
        string = string.replace('<{}>'.format(key), value)
    return string


def read_yaml(path):
    '''Load a yaml file, returning whatever safe_load gives back'''
    with open(path, 'r', encoding='UTF-8') as fd:
        return yaml.safe_load(fd)


@contextlib.contextmanager
def pushd(path) -> Iterator[str]:
    '''Change into path for the body of a with block

    The previous working directory is restored on the way out, whether the
    body returns normally or raises.
    '''
    prev = os.getcwd()
    os.chdir(path)
    try:
        yield prev
    finally:
        os.chdir(prev)
