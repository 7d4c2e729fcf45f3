"""Test suite for the Survey Quota backend."""
