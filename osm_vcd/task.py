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
Asynchronous operation handles returned by vCloud Director.
"""

import logging
import time

from osm_vcd.errors import VcdException, VcdTaskError, VcdTimeoutException
from osm_vcd.types import TaskType

TASK_SUCCESS = 'success'
TASK_ERROR = 'error'
TASK_CANCELED = 'canceled'
TASK_ABORTED = 'aborted'
TASK_FAILED_STATUSES = (TASK_ERROR, TASK_CANCELED, TASK_ABORTED)


class Task(object):

    def __init__(self, client, task=None):
        self.client = client
        self.task = task or TaskType()
        self.logger = logging.getLogger('vcd.task')

    @classmethod
    def from_xml(cls, client, element):
        return cls(client, TaskType.from_xml(element))

    @property
    def href(self):
        return self.task.href

    @property
    def status(self):
        return self.task.status

    def __repr__(self):
        return "Task(href={!r}, operation={!r}, status={!r})".format(self.task.href, self.task.operation_name,
                                                                     self.task.status)

    def refresh(self):
        if not self.task.href:
            raise VcdException("cannot refresh, Object is empty")
        self.task = TaskType.from_xml(self.client.get_resource(self.task.href))

    def wait_task_completion(self, timeout=None, interval=None):
        """Block until the task succeeds.

        Args:
            timeout: seconds to wait, client max_retry_timeout by default.
            interval: seconds between two refreshes, client task_poll_interval by default.

        Raises:
            VcdTaskError: the task ended with error, canceled or aborted status.
            VcdTimeoutException: the task did not finish in time.
        """
        return self.wait_inspect_task_completion(None, timeout=timeout, interval=interval)

    def wait_inspect_task_completion(self, inspector, timeout=None, interval=None):
        """Same as wait_task_completion calling ``inspector(task, elapsed)`` after every refresh"""
        if timeout is None:
            timeout = self.client.max_retry_timeout
        if interval is None:
            interval = self.client.task_poll_interval

        start_time = time.time()
        while True:
            self.refresh()
            elapsed = time.time() - start_time
            if inspector is not None:
                inspector(self, elapsed)

            self.logger.debug("Task {} {} status: {}".format(self.task.operation_name, self.task.href,
                                                             self.task.status))
            if self.task.status == TASK_SUCCESS:
                return self
            if self.task.status in TASK_FAILED_STATUSES:
                raise VcdTaskError("task {} finished with status {}: {}".format(
                    self.task.operation_name or self.task.href, self.task.status,
                    self.task.error_message), task=self)
            if elapsed >= timeout:
                raise VcdTimeoutException("Timeout while waiting for task {} after {} seconds".format(
                    self.task.href, timeout))
            time.sleep(interval)
