"""Core application for the hospital administration backend.

Models, serializers, services, views and routes for patients, doctors,
appointments and medical records.
"""
