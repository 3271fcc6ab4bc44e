"""
adsb2dd - ADS-B to delay-Doppler conversion service.

Clients register a receiver/transmitter/frequency/tar1090 configuration once
and then poll the cached bistatic delay-Doppler output, which a background
scheduler keeps up to date.
"""
__version__ = "1.0.0"
