from subgraph_checks.graphos.client import CUSTOM_CHECK_CALLBACK_MUTATION, DOCS_QUERY, GraphOSClient
from subgraph_checks.graphos.memory import InMemoryDocumentStore, RecordingReporter, ReportedCheck, content_hash

__all__ = [
    "CUSTOM_CHECK_CALLBACK_MUTATION",
    "DOCS_QUERY",
    "GraphOSClient",
    "InMemoryDocumentStore",
    "RecordingReporter",
    "ReportedCheck",
    "content_hash",
]
