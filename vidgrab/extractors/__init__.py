"""Per-site extractors that turn a page address into downloadable media records."""