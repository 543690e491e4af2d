"""
Test suite for EPA Partition.

This package contains all tests organized by component:
- test_algorithms/: Tests for similarity, permutations, partitions and the sampler
- test_config.py: Tests for configuration and logging setup
"""
