import gc

import pytest

from ripple.dep import Dep
from ripple.proxy import proxy_db


@pytest.fixture(autouse=True)
def clear():
    try:
        yield
    finally:
        # an effect that failed halfway should never leave
        # its mark on the next test
        Dep.stack.clear()


@pytest.fixture(autouse=True)
def clear_proxy_db():
    # Would be nice to do this at the end of runs, but
    # it seems that pytest keeps some references to some objects
    # so we're not able to guarentee that the db can be
    # cleared properly afterwards.
    gc.collect()
    # Running gc at the beginning should clear the proxy_db,
    # but this apparently only works when tests are not failing,
    # so the db needs to be cleared like this.
    proxy_db.db = {}
