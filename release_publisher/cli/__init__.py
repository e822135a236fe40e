"""
Release Publisher CLI - Command-line interface for publishing releases.

Commands:
- publish: Package, upload, and announce a release build
- check: Evaluate the release gate for the current build
"""
