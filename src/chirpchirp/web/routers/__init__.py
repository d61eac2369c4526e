"""API routers for the ChirpChirp web application."""
