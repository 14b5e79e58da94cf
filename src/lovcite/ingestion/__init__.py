"""Statute ingestion: XML export -> document tree -> provisions -> seed record."""
