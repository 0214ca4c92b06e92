"""pyohm DC Analysis Module.

This module builds Modified Nodal Analysis (MNA) systems for linear DC
circuits and solves them for the operating point.

Components:
    - R: Linear resistor
    - VSource: Ideal DC voltage source
    - ISource: Ideal DC current source
    - Ground: Ground reference marker
"""

from .network import Network, Node, ComponentRef, ComponentSpec
from .components import R, VSource, ISource, Ground
from .assembler import MNASystem, NodeIndexMap, assemble, build_node_index_map, validate_network
from .analysis import (
    ConvergenceInfo,
    DCAnalysisResult,
    DCSolver,
    DCSweepResult,
    OperatingPoint,
    analyze_dc,
    compile_network,
    dc_sweep,
)

__all__ = [
    # Network building
    "Network",
    "Node",
    "ComponentRef",
    "ComponentSpec",
    # Components
    "R",
    "VSource",
    "ISource",
    "Ground",
    # Assembly
    "MNASystem",
    "NodeIndexMap",
    "assemble",
    "build_node_index_map",
    "validate_network",
    # Analysis
    "ConvergenceInfo",
    "DCAnalysisResult",
    "DCSolver",
    "DCSweepResult",
    "OperatingPoint",
    "analyze_dc",
    "compile_network",
    "dc_sweep",
]
