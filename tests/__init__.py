"""
seqset test suite.

Tests are organized by module:
- test_encoding: Alphabet lookup and pair encoding
- test_dataset: SequenceDataset container and file format
- test_dssp: DSSP structure-record extractor
- test_genbank: GenBank annotation-record extractor
- test_cli: Command-line interface
"""
