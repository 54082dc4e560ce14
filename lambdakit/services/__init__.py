"""Clients for services a handler talks to, such as the platform REST API."""
