"""Configuration module for rediskv."""
