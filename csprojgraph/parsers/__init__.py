"""Parsers package.

Build-descriptor (msbuild) and package-manifest (nuget) readers live here.
"""
