import numpy as np
import pytest
import taichi as ti

import tiradix
from conftest import random_keys
from tiradix import RadixSort
from tiradix.Device import Dispatch
from tiradix.utils.constants import PASS_COUNT


def check_sorted(keys, values, result):
    order = np.argsort(keys, kind="stable")
    np.testing.assert_array_equal(result.keys, keys[order])
    np.testing.assert_array_equal(result.values, values[order])


def test_reverse_ordered_keys_with_doubled_values():
    keys = np.arange(1000, 0, -1, dtype=np.uint32)
    result = tiradix.sort(keys, keys * 2)
    np.testing.assert_array_equal(result.keys, np.arange(1, 1001, dtype=np.uint32))
    np.testing.assert_array_equal(result.values, np.arange(2, 2001, 2, dtype=np.uint32))


def test_equal_keys_keep_their_order():
    keys = np.full(1000, 42, dtype=np.uint32)
    result = tiradix.sort(keys, np.arange(1000))
    assert np.all(result.keys == 42)
    np.testing.assert_array_equal(result.values, np.arange(1000, dtype=np.uint32))


def test_two_million_random_keys(rng):
    keys = random_keys(rng, 2_000_000)
    values = rng.integers(0, 2 ** 32, size=keys.shape[0], dtype=np.uint32)
    result = tiradix.sort(keys, values)
    assert np.all(np.diff(result.keys.astype(np.int64)) >= 0)
    np.testing.assert_array_equal(result.keys, np.sort(keys))
    check_sorted(keys, values, result)


def test_empty_input():
    result = tiradix.sort([], [])
    assert result.keys.shape == (0,)
    assert result.values.shape == (0,)


def test_single_element():
    result = tiradix.sort([123456789], [5])
    assert result.keys.tolist() == [123456789]
    assert result.values.tolist() == [5]


@pytest.mark.parametrize("num_keys", [2, 255, 1023, 1025, 3333, 70000])
def test_partial_last_group(rng, num_keys):
    keys = random_keys(rng, num_keys)
    values = np.arange(num_keys, dtype=np.uint32)
    check_sorted(keys, values, tiradix.sort(keys, values))


def test_maximal_keys_next_to_padding(rng):
    keys = random_keys(rng, 3000)
    keys[::3] = 0xFFFFFFFF
    values = np.arange(3000, dtype=np.uint32)
    result = tiradix.sort(keys, values)
    check_sorted(keys, values, result)
    assert np.count_nonzero(result.keys == 0xFFFFFFFF) == 1000


def test_small_key_range_many_duplicates(rng):
    keys = rng.integers(0, 8, size=5000, dtype=np.uint32)
    values = rng.integers(0, 2 ** 32, size=5000, dtype=np.uint32)
    check_sorted(keys, values, tiradix.sort(keys, values))


def test_sorting_sorted_input_changes_nothing(rng):
    keys = np.sort(random_keys(rng, 4096))
    values = np.arange(4096, dtype=np.uint32)
    result = tiradix.sort(keys, values)
    np.testing.assert_array_equal(result.keys, keys)
    np.testing.assert_array_equal(result.values, values)


def test_output_is_a_permutation(rng):
    keys = rng.integers(0, 1000, size=10000, dtype=np.uint32)
    values = rng.integers(0, 2 ** 32, size=10000, dtype=np.uint32)
    result = tiradix.sort(keys, values)
    np.testing.assert_array_equal(np.sort(result.keys), np.sort(keys))
    np.testing.assert_array_equal(np.sort(result.values), np.sort(values))


def test_argsort_matches_stable_numpy(rng):
    keys = rng.integers(0, 50, size=2500, dtype=np.uint32)
    np.testing.assert_array_equal(tiradix.argsort(keys), np.argsort(keys, kind="stable"))


def test_sorter_is_reusable(rng):
    sorter = RadixSort(5000)
    assert sorter.state == "Idle"
    for num_keys in (5000, 17, 4096):
        keys = random_keys(rng, num_keys)
        values = np.arange(num_keys, dtype=np.uint32)
        check_sorted(keys, values, sorter.sort(keys, values))
        assert sorter.state == "Done"


def test_command_sequence_covers_all_passes():
    sorter = RadixSort(3000)
    commands = sorter.encode(3000)
    dispatches = [command.pipeline.name for command in commands if isinstance(command, Dispatch)]
    assert dispatches == ["histogram", "reduce", "scan", "scan_add", "scatter"] * PASS_COUNT
    assert sorter.final_slot() == 0
    copies = [command for command in commands if type(command).__name__ == "CopyBufferToBuffer"]
    assert [copy.slot for copy in copies] == [0, 0]


def test_small_workgroup_matches_default(rng):
    keys = random_keys(rng, 5000)
    values = np.arange(5000, dtype=np.uint32)
    check_sorted(keys, values, tiradix.sort(keys, values, workgroup_size=16))


def test_lost_device_fails_the_sort(rng, monkeypatch):
    sorter = RadixSort(100)
    def lost():
        raise RuntimeError("device removed")
    monkeypatch.setattr(ti, "sync", lost)
    result = None
    with pytest.raises(tiradix.DeviceLost):
        result = sorter.sort(random_keys(rng, 100))
    assert result is None
    assert sorter.state == "Failed"


def test_failed_upload_fails_the_sort(rng, monkeypatch):
    sorter = RadixSort(100)
    def rejected(buffer, data):
        raise tiradix.SubmissionFailure("write rejected")
    monkeypatch.setattr(sorter.device.queue, "write_buffer", rejected)
    with pytest.raises(tiradix.SubmissionFailure):
        sorter.sort(random_keys(rng, 100))
    assert sorter.state == "Failed"
