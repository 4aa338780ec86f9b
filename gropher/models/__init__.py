from .graph import Vertex, Edge, GraphDocument
from .interop import NodeLinkNode, NodeLinkLink, NodeLinkDocument, NodeLinkCollection
