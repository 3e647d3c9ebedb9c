from tiradix.kernels.Histogram import Histogram
from tiradix.kernels.Reduce import Reduce
from tiradix.kernels.Scan import Scan
from tiradix.kernels.ScanAdd import ScanAdd
from tiradix.kernels.Scatter import Scatter
from tiradix.kernels.GroupMemory import GroupMemory
from tiradix.kernels.ScanHierarchy import ScanHierarchy
