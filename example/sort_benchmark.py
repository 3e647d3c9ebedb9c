import numpy as np

from tiradix import *

init(arch='gpu', log=False)

num_keys = 2000000
keys = np.arange(num_keys, 0, -1, dtype=np.uint32)
values = keys * 2

sorter = RadixSort(num_keys, log=True, verbose=True)
result = sorter.sort(keys, values)

expected = np.arange(1, num_keys + 1, dtype=np.uint32)
if not np.array_equal(result.keys, expected) or not np.array_equal(result.values, expected * 2):
    raise RuntimeError("Sorted output does not match the expected ordering")
print("Sorted", num_keys, "keys, state:", sorter.state)
sorter.timer.profile0()
sorter.timer.profile1()
