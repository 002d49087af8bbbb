"""smtcore/parse — Readers for DIMACS CNF and EUF problem text."""
