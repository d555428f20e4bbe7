"""
nFR Kernel - multigenerational royalty accounting.

Core state of the royalty engine:
- Fixed-point (18 decimal) truncating arithmetic
- Per-asset generation windows with a bounded FIFO shift
- Listing book gating priced sales
- Pull-based claim ledger with checks-effects-interactions release
"""

__version__ = "0.1.0"
