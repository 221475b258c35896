# This file is part of entrofuzz.
#
# Copyright the entrofuzz Authors.
# Individual contributors are listed in the git log.
#
# This Source Code Form is subject to the terms of the Mozilla Public License,
# v. 2.0. If a copy of the MPL was not distributed with this file, You can
# obtain one at https://mozilla.org/MPL/2.0/.

import pytest

from entrofuzz import settings
from entrofuzz.internal.entropy import deterministic_PRNG


def pytest_configure(config):
    config.addinivalue_line("markers", "slow: a test which sleeps on purpose.")


@pytest.fixture(scope="function", autouse=True)
def _deterministic_global_random():
    """Seeds are drawn from the global PRNG, so pin it for reproducible
    runs."""
    with deterministic_PRNG():
        yield


@pytest.fixture(scope="function", autouse=True)
def _restore_default_profile():
    yield
    settings.load_profile("default")
