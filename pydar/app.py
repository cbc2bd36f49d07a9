# app.py - global information of the application.

APP = "pydar"
VERSION = "0.1.0"
