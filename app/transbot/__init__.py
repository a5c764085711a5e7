# -*- coding: utf-8 -*-
"""
Discord channel translation relay: pipeline, services and Discord adapters
"""
