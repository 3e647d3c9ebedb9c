from tiradix.utils.constants import HIERARCHY_LEVELS, MAX_BUFFER_BYTES, WORKGROUP_SIZE
from tiradix.utils.ObjectIO import DictIO


class SortSettings(object):
    keywords = ("workgroup_size", "levels", "max_buffer_bytes", "log", "verbose")

    def __init__(self) -> None:
        self.workgroup_size = WORKGROUP_SIZE
        self.levels = HIERARCHY_LEVELS
        self.max_buffer_bytes = MAX_BUFFER_BYTES
        self.log = False
        self.verbose = False

    def set_configuration(self, **kwargs):
        unknown = DictIO.unknown(kwargs, self.keywords)
        if unknown:
            raise KeyError(f"KeyError: {unknown} is not a sorting keyword, please choose in the following: {list(self.keywords)}")
        self.set_workgroup_size(DictIO.GetAlternative(kwargs, "workgroup_size", self.workgroup_size))
        self.set_levels(DictIO.GetAlternative(kwargs, "levels", self.levels))
        self.set_max_buffer_bytes(DictIO.GetAlternative(kwargs, "max_buffer_bytes", self.max_buffer_bytes))
        self.set_log(DictIO.GetAlternative(kwargs, "log", self.log))
        self.set_verbose(DictIO.GetAlternative(kwargs, "verbose", self.verbose))

    def set_workgroup_size(self, workgroup_size):
        if isinstance(workgroup_size, bool) or not isinstance(workgroup_size, int):
            raise ValueError("Keyword:: /workgroup_size/ should be an integer")
        self.workgroup_size = workgroup_size

    def set_levels(self, levels):
        if isinstance(levels, bool) or not isinstance(levels, int) or levels < 1:
            raise ValueError("Keyword:: /levels/ should be a positive integer")
        self.levels = levels

    def set_max_buffer_bytes(self, max_buffer_bytes):
        if isinstance(max_buffer_bytes, bool) or not isinstance(max_buffer_bytes, int) or max_buffer_bytes <= 0:
            raise ValueError("Keyword:: /max_buffer_bytes/ should be a positive integer")
        self.max_buffer_bytes = max_buffer_bytes

    def set_log(self, log):
        self.log = bool(log)

    def set_verbose(self, verbose):
        self.verbose = bool(verbose)
