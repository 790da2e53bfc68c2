"""
polarisci - Coverity on Polaris integration for CI pipelines.

Installs the Polaris CLI on build agents and reports the issue count of the
most recent analysis back to the pipeline.
"""

__version__ = "0.1.0"
