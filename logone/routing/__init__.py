"""logone event routing.

The ``Router`` classifies decoded events, drives the unit registries and
the stats aggregator, and pushes presentation requests through the
``PresentationDispatcher``, which fans each request out to every
registered sink (the terminal, or any object implementing the
``PresentationSink`` protocol).
"""
