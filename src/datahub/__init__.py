from .count_dataset import CountDataset
from .io import fetch_table
from .loader import align_dataset, load_count_dataset
from .tables import read_annotation_table, read_count_table, write_table

__all__ = [
    "CountDataset",
    "align_dataset",
    "fetch_table",
    "load_count_dataset",
    "read_annotation_table",
    "read_count_table",
    "write_table",
]
