import zlib

import numpy as np
import pytest

import tiradix
from tiradix.Device import Device
from tiradix.utils.constants import BIN_COUNT


@pytest.fixture(scope="session", autouse=True)
def taichi_runtime():
    tiradix.init(arch="cpu", log=False)
    yield


@pytest.fixture
def device():
    return Device.request()


@pytest.fixture
def rng(request):
    return np.random.default_rng(zlib.crc32(request.node.name.encode()))


def random_keys(rng, num_keys):
    return rng.integers(0, 2 ** 32, size=num_keys, dtype=np.uint32)


def upload(device, label, data):
    data = np.asarray(data, dtype=np.uint32)
    buffer = device.create_buffer(label, data.shape)
    device.queue.write_buffer(buffer, data)
    return buffer


def histogram_table(keys, shift, block_size):
    num_groups = -(-keys.shape[0] // block_size)
    digits = (keys >> np.uint32(shift)) & np.uint32(0xF)
    table = np.zeros((BIN_COUNT, num_groups), dtype=np.uint32)
    for group in range(num_groups):
        table[:, group] = np.bincount(digits[group * block_size:(group + 1) * block_size], minlength=BIN_COUNT)
    return table


def exclusive_scan(values):
    values = np.asarray(values, dtype=np.uint64)
    return (np.cumsum(values) - values).astype(np.uint32)
