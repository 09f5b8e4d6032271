"""dgmlkit - build directed graph documents from arbitrary Python objects."""

from .analyses import Analysis, GraphAnalysis, GraphEditor, HubNodeAnalysis, NodeReferencedAnalysis
from .assembler import DgmlBuilder, assemble
from .builders import (
    CategoriesBuilder,
    CategoryBuilder,
    LinkBuilder,
    LinksBuilder,
    NodeBuilder,
    NodesBuilder,
    StyleBuilder,
    StylesBuilder,
)
from .errors import AnalysisError, AssemblyError, DgmlError, RuleInvocationError
from .model import Category, Condition, Graph, Link, Node, Property, Setter, Style
from .registry import BuilderRegistry

__version__ = "0.1.0"

__all__ = [
    "Analysis",
    "AnalysisError",
    "AssemblyError",
    "BuilderRegistry",
    "CategoriesBuilder",
    "Category",
    "CategoryBuilder",
    "Condition",
    "DgmlBuilder",
    "DgmlError",
    "Graph",
    "GraphAnalysis",
    "GraphEditor",
    "HubNodeAnalysis",
    "Link",
    "LinkBuilder",
    "LinksBuilder",
    "Node",
    "NodeBuilder",
    "NodeReferencedAnalysis",
    "NodesBuilder",
    "Property",
    "RuleInvocationError",
    "Setter",
    "Style",
    "StyleBuilder",
    "StylesBuilder",
    "assemble",
]
