"""HTTP clients for the Amadeus and Schiphol APIs."""
