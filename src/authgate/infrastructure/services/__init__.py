"""Outbound services: User API, TNC API and OTP mail."""
