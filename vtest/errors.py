# Copyright lowRISC contributors.
# Licensed under the Apache License, Version 2.0, see LICENSE for details.
# SPDX-License-Identifier: Apache-2.0


class VtestError(RuntimeError):
    pass


class ConfigException(VtestError):
    pass


class StepFailed(VtestError):
    '''Raised when one of the flow's commands exits with a non-zero code'''

    def __init__(self, step: str, returncode: int):
        super().__init__('Step {!r} failed with return code {}'
                         .format(step, returncode))
        self.step = step
        self.returncode = returncode
