"""Prometheus metrics for plagiarism checks."""
from prometheus_client import Counter, Histogram

BATCHES_TOTAL = Counter(
    "plagiarism_batches_total",
    "Plagiarism check batches by outcome",
    ["outcome"],
)

DOCUMENTS_EXTRACTED_TOTAL = Counter(
    "plagiarism_documents_extracted_total",
    "Documents extracted by file type",
    ["file_type"],
)

PAIRS_FLAGGED_TOTAL = Counter(
    "plagiarism_pairs_flagged_total",
    "Document pairs reported above the similarity threshold",
)

BATCH_DURATION_SECONDS = Histogram(
    "plagiarism_batch_duration_seconds",
    "Time spent extracting and comparing one batch",
)
