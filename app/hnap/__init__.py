"""Modems that authenticate with the HNAP challenge-response login (Arris S33, Motorola MB8611).

Only the login, the channel-info multi-query and the table parsing are implemented; HNAP exposes a
lot of other actions (reboot, event log, ...) that have nothing to do with signal metrics.
"""
