"""
Application layer for the workout conversion engine.

This package contains:
- ports/: Protocol interfaces for readers, writers, XML validators and the FIT codec
- use_cases/: conversion and round-trip validation orchestrated through those ports
"""
