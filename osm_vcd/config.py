# -*- coding: utf-8 -*-

##
# Copyright 2019 VMware Inc.
# This file is part of ETSI OSM
# All Rights Reserved.
#
# Licensed under the Apache License, Version 2.0 (the "License"); you may
# not use this file except in compliance with the License. You may obtain
# a copy of the License at
#
#         http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS, WITHOUT
# WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied. See the
# License for the specific language governing permissions and limitations
# under the License.
#
# For those usages not covered by the Apache License, Version 2.0 please
# contact:  osslegalrouting@vmware.com
##

"""
Configuration of the vCloud Director client.

The configuration is a yaml file with two sections::

    global:
        loglevel: DEBUG
        logfile:  /var/log/osm/vcd.log
    vcd:
        url:      https://vcd.example.com
        user:     admin
        password: secret
        org:      myorg

Any value can be overridden with an environment variable named
OSMVCD_<SECTION>_<KEY>, e.g. OSMVCD_VCD_PASSWORD.
"""

import logging
import logging.handlers
from os import environ

import yaml
from jsonschema import exceptions as js_e
from jsonschema import validate as js_v

from osm_vcd.client import API_VERSION, MAX_RETRY_TIMEOUT, TASK_POLL_INTERVAL, Client
from osm_vcd.errors import VcdConfigException

ENV_PREFIX = "OSMVCD_"

log_format_simple = "%(asctime)s %(levelname)s %(name)s %(filename)s:%(lineno)s %(message)s"
log_level_schema = {"type": "string", "enum": ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]}

config_schema = {
    "title": "vcd client configuration schema",
    "$schema": "http://json-schema.org/draft-04/schema#",
    "type": "object",
    "properties": {
        "global": {
            "type": "object",
            "properties": {
                "loglevel": log_level_schema,
                "logfile": {"type": "string"},
            },
            "additionalProperties": False,
        },
        "vcd": {
            "type": "object",
            "properties": {
                "url": {"type": "string", "pattern": "^https?://"},
                "user": {"type": "string"},
                "password": {"type": "string"},
                "org": {"type": "string"},
                "vdc": {"type": "string"},
                "api_version": {"type": "string"},
                "verify": {"type": "boolean"},
                "max_retry_timeout": {"type": "integer", "minimum": 1},
                "task_poll_interval": {"type": "number", "minimum": 0},
            },
            "required": ["url"],
            "additionalProperties": False,
        },
    },
    "required": ["vcd"],
}

# keys converted from the environment text
_int_keys = ("max_retry_timeout",)
_float_keys = ("task_poll_interval",)
_bool_keys = ("verify",)


def _env_value(key, value):
    if key in _int_keys:
        return int(value)
    if key in _float_keys:
        return float(value)
    if key in _bool_keys:
        return value.lower() in ("1", "true", "yes")
    return value


def apply_environ(conf, env=None):
    """Override the configuration with the OSMVCD_<SECTION>_<KEY> variables"""
    logger = logging.getLogger('vcd')
    env = environ if env is None else env
    for k, v in env.items():
        if not k.startswith(ENV_PREFIX):
            continue
        k_items = k[len(ENV_PREFIX):].lower().split("_", 1)
        if len(k_items) != 2:
            logger.warning("skipping environ '{}': expected {}<SECTION>_<KEY>".format(k, ENV_PREFIX))
            continue
        section, key = k_items
        try:
            conf.setdefault(section, {})[key] = _env_value(key, v)
        except ValueError as e:
            logger.warning("skipping environ '{}' on exception '{}'".format(k, e))
    return conf


def validate_config(conf):
    try:
        js_v(conf, config_schema)
    except js_e.ValidationError as exc:
        where = ".".join(str(p) for p in exc.path)
        raise VcdConfigException("invalid configuration{}: {}".format(" at '{}'".format(where) if where else "",
                                                                      exc.message))
    return conf


def read_config_file(config_file=None, env=None, overrides=None):
    """Load, override with the environment and validate the configuration.

    Args:
        config_file: path of the yaml file, None to use only the environment.
        env: mapping used instead of os.environ.
        overrides: dict of section to dict of values, applied last. None
            values are ignored.

    Raises:
        VcdConfigException: the file cannot be read or the result is not valid.
    """
    conf = {}
    if config_file:
        try:
            with open(config_file) as f:
                conf = yaml.safe_load(f) or {}
        except (IOError, yaml.YAMLError) as e:
            raise VcdConfigException("At config file '{}': {}".format(config_file, e))
        if not isinstance(conf, dict):
            raise VcdConfigException("At config file '{}': expected a mapping".format(config_file))
    apply_environ(conf, env)
    for section, values in (overrides or {}).items():
        for key, value in values.items():
            if value is not None:
                conf.setdefault(section, {})[key] = value
    conf.setdefault("global", {})
    return validate_config(conf)


def setup_logging(config):
    """Configure the 'vcd' logger from the global section"""
    logger = logging.getLogger('vcd')
    log_formatter_simple = logging.Formatter(log_format_simple, datefmt='%Y-%m-%dT%H:%M:%S')
    global_config = config.get("global", {})
    if global_config.get("logfile"):
        handler = logging.handlers.RotatingFileHandler(global_config["logfile"],
                                                       maxBytes=100e6, backupCount=9, delay=0)
    else:
        handler = logging.StreamHandler()
    handler.setFormatter(log_formatter_simple)
    logger.addHandler(handler)

    if global_config.get("loglevel"):
        logger.setLevel(global_config["loglevel"])
    return logger


def client_from_config(config, login=True):
    """Return a Client for the vcd section, logged in unless login is False"""
    vcd_config = config["vcd"]
    client = Client(vcd_config["url"],
                    user=vcd_config.get("user"),
                    passwd=vcd_config.get("password"),
                    org_name=vcd_config.get("org"),
                    api_version=vcd_config.get("api_version", API_VERSION),
                    verify=vcd_config.get("verify", False),
                    max_retry_timeout=vcd_config.get("max_retry_timeout", MAX_RETRY_TIMEOUT),
                    task_poll_interval=vcd_config.get("task_poll_interval", TASK_POLL_INTERVAL))
    if login:
        client.login()
    return client
