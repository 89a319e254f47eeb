"""
Neural Network Playground - Source Package
==========================================

Build a small feed-forward network, train it step by step or continuously
on a synthetic dataset, and watch its weights and activations change.

Modules:
    ai/         - Network engine, optimizer and training controller
    data/       - Synthetic datasets
    visualizer/ - Visualization graph and pygame rendering
    utils/      - Logging
"""

__version__ = "1.0.0"
