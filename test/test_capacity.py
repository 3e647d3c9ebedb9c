import numpy as np
import pytest

import tiradix
from conftest import random_keys
from tiradix import RadixSort
from tiradix.kernels import ScanHierarchy
from tiradix.utils.constants import BIN_COUNT


def test_default_hierarchy_bound():
    hierarchy = ScanHierarchy(1024, levels=1)
    assert hierarchy.max_elements() == 64 * 1024 * 1024
    assert hierarchy.row_lengths(64 * 1024 * 1024) == [65536, 64]
    assert BIN_COUNT * hierarchy.row_lengths(64 * 1024 * 1024)[-1] == 1024
    with pytest.raises(tiradix.CapacityExceeded):
        hierarchy.check_capacity(64 * 1024 * 1024 + 1)


def test_more_levels_raise_the_bound():
    assert ScanHierarchy(64, levels=2).max_elements() == 64 * ScanHierarchy(64, levels=1).max_elements()
    assert ScanHierarchy(1024, levels=2).max_elements() == (1 << 31) - 1
    assert ScanHierarchy(64, levels=3).row_lengths(5000) == [79, 2, 1, 1]


def test_hierarchy_needs_a_level():
    with pytest.raises(ValueError):
        ScanHierarchy(1024, levels=0)


def test_sorter_refuses_too_many_elements():
    # 16 lanes x 4 elements: one reduce level scans at most 4 * 64 groups
    with pytest.raises(tiradix.CapacityExceeded):
        RadixSort(16385, workgroup_size=16)
    with pytest.raises(tiradix.AllocationFailure):
        tiradix.sort(np.zeros(16385, dtype=np.uint32), workgroup_size=16)


def test_sorter_refuses_more_than_allocated():
    sorter = RadixSort(100)
    with pytest.raises(tiradix.CapacityExceeded):
        sorter.sort(np.arange(101))


@pytest.mark.parametrize("num_keys", [16384, 20000])
def test_extra_level_sorts_past_the_bound(rng, num_keys):
    keys = random_keys(rng, num_keys)
    values = np.arange(num_keys, dtype=np.uint32)
    result = tiradix.sort(keys, values, workgroup_size=16, levels=2)
    order = np.argsort(keys, kind="stable")
    np.testing.assert_array_equal(result.keys, keys[order])
    np.testing.assert_array_equal(result.values, values[order])


def test_buffer_limit_is_enforced():
    with pytest.raises(tiradix.AllocationFailure):
        RadixSort(1_000_000, max_buffer_bytes=1024)
