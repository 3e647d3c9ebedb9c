# Copyright (c) 2026, tiradix developers
# This file is from the tiradix project, released under the GNU General Public License v3.0

__author__ = "tiradix developers"
__version__ = "0.1.0"
__license__ = "GNU License"
__description__ = 'A Multi-Kernel Radix Sort for Unsigned 32-bit Keys'

import taichi as ti
from taichi.lang.impl import current_cfg
import psutil, pynvml, platform
import sys, os, datetime

from tiradix.Device import Device
from tiradix.RadixSort import RadixSort, SortResult
from tiradix.utils.Exceptions import (RadixSortError, EnvironmentUnavailable, DeviceRequestFailure, AllocationFailure,
                                      CapacityExceeded, CompileFailure, SubmissionFailure, DeviceLost)
from tiradix.utils.linalg import bytes_to_GB


class Logger(object):
    def __init__(self, filename='Default.log', path='./'):
        self.terminal = sys.stdout
        self.path = os.path.join(path, filename)
        self.log = open(self.path, "a", encoding='utf8')

    def write(self, message):
        self.terminal.write(message)
        self.log.write(message)

    def flush(self):
        self.terminal.flush()
        self.log.flush()


def make_print_to_file(path='./'):
    filename = datetime.datetime.now().strftime('day'+'%Y_%m_%d')
    sys.stdout = Logger(filename+'.log', path=path)


def print_gpu_info():
    try:
        pynvml.nvmlInit()
        handle = pynvml.nvmlDeviceGetHandleByIndex(0)
        gpu_name = pynvml.nvmlDeviceGetName(handle)
        gpu_memory = pynvml.nvmlDeviceGetMemoryInfo(handle)
        pynvml.nvmlShutdown()
    except pynvml.NVMLError as e:
        print(f"Device information is not available through NVML ({e})")
        return
    print(f"Using device {gpu_name} (Total: {bytes_to_GB(gpu_memory.total)}GB, Available: {bytes_to_GB(gpu_memory.free)}GB)")


def init(arch="gpu", cpu_max_num_threads=0, offline_cache=True, debug=False, device_memory_GB=None, device_memory_fraction=None,
         kernel_profiler=False, log=True, strict=False):
    """
    Initializes the Taichi runtime environment.
    Args:
        arch (str): The execution architecture. Can be either "cpu" or "gpu".
        cpu_max_num_threads (int): The maximum number of threads to use if the backend is CPU. Defaults to the maximum number of threads available on the CPU.
        offline_cache (bool): Whether to store compiled files. Defaults to True.
        debug (bool): Whether to enable debug mode (bounds-checked buffer access).
        device_memory_GB (int): The pre-allocated GPU memory size in GB.
        device_memory_fraction (float): The fraction of device memory to be used if the backend is GPU.
        kernel_profiler (bool): Whether to enable kernel function profiling.
        log (bool): Whether to mirror the printed output into a dated log file.
        strict (bool): Raise EnvironmentUnavailable instead of running on the CPU when no GPU backend is found.
    """
    options = dict(offline_cache=offline_cache, debug=debug, default_ip=ti.i32, kernel_profiler=kernel_profiler, log_level=ti.ERROR)
    if arch == "cpu":
        cpu_name = platform.processor()
        cpu_core = psutil.cpu_count(False)
        cpu_logic = psutil.cpu_count(True)
        print(f"Using device {cpu_name} (Core: {cpu_core}, Logic: {cpu_logic})")
        if cpu_max_num_threads != 0:
            options.update(cpu_max_num_threads=cpu_max_num_threads)
        target = ti.cpu
    elif arch == "gpu":
        print_gpu_info()
        if device_memory_GB is not None:
            options.update(device_memory_GB=device_memory_GB)
        elif device_memory_fraction is not None:
            options.update(device_memory_fraction=device_memory_fraction)
        target = ti.gpu
    else:
        raise EnvironmentUnavailable("arch is not recognized, please choose in the following: ['cpu', 'gpu']")

    try:
        ti.init(arch=target, **options)
    except RuntimeError as e:
        raise DeviceRequestFailure(f"Failed to initialize the {arch} backend: {e}") from e
    # kernel objects compiled for a previous runtime are stale
    Device.reset_pipelines()

    if arch == "gpu" and current_cfg().arch == ti.cpu:
        if strict:
            raise EnvironmentUnavailable("No GPU backend is available on this machine")
        print("No GPU backend is available, falling back to CPU")

    if log:
        make_print_to_file()


def sort(keys, values=None, **kwargs):
    """Sort u32 keys ascending and permute values alongside.

    Returns a :class:`SortResult` of numpy arrays. Without ``values`` the
    returned values are the original positions of the sorted keys.
    """
    keys = keys if hasattr(keys, "__len__") else list(keys)
    sorter = RadixSort(len(keys), **kwargs)
    return sorter.sort(keys, values)


def argsort(keys, **kwargs):
    return sort(keys, **kwargs).values
