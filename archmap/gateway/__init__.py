"""HTTP gateway exposing architecture views, search and cache control."""
