"""plydecode – streaming PLY point-cloud decoder.

Components:
- Type mapping from PLY property tags to native dtypes (core.dtypes)
- AttributeSlot typed column buffers (core.slot)
- DecodeSession and the per-value callback (core.session, core.callback)
- Triplet merging into positions/normals/colors (core.assembler)
- rply-style header/value tokenizer (core.tokenizer)
- read_point_cloud / load_point_cloud entry points (core.reader)
- NPZ and LAS/LAZ exporters (core.exporter)
"""

from .core.dtypes import NativeDtype, native_dtype
from .core.errors import (
    PlyDecodeError, UnsupportedTypeError, CountMismatchError,
    GroupInconsistencyError, GroupSizeMismatchError, GroupDtypeMismatchError,
    StreamReadError, ElementNotFoundError,
)
from .core.slot import AttributeSlot, create_slot
from .core.session import DecodeSession
from .core.assembler import assemble_attributes, concat_columns
from .core.pointcloud import PointCloud
from .core.progress import CountingProgressReporter, NullProgress, TqdmProgress
from .core.tokenizer import PlyTokenizer
from .core.reader import decode_element, load_point_cloud, read_point_cloud
from .core.exporter import LasWriter, NpzWriter
