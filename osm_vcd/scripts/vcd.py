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
vCloud Director vApp shell/cli
"""

import sys

import click
from prettytable import PrettyTable

from osm_vcd.config import client_from_config, read_config_file, setup_logging
from osm_vcd.errors import VcdException, VcdNotFoundException
from osm_vcd.network import DhcpSettings, VappNetworkSettings
from osm_vcd.types import VAPP_STATUSES, IPRange
from osm_vcd.vapp import VApp


class CliContext(object):
    """Options of the invocation; configuration and login happen on first use"""

    def __init__(self, config_file=None, overrides=None):
        self.config_file = config_file
        self.overrides = overrides
        self._config = None
        self._client = None

    @property
    def config(self):
        if self._config is None:
            self._config = read_config_file(self.config_file, overrides=self.overrides)
            setup_logging(self._config)
        return self._config

    @property
    def client(self):
        if self._client is None:
            self._client = client_from_config(self.config)
        return self._client


def fail(inst):
    print(str(inst))
    sys.exit(1)


def find_vapp(ctx, name):
    """Return the VApp called ``name``, looked up with the query service"""
    client = ctx.obj.client
    records = client.query_records('vApp', 'name=={}'.format(name))
    vdc_name = ctx.obj.config["vcd"].get("vdc")
    if vdc_name:
        records = [record for record in records if record.get('vdcName') == vdc_name]
    if not records:
        raise VcdNotFoundException("vApp {} not found".format(name))
    return VApp.from_href(client, records[0]['href'])


def print_task(task, wait, timeout=None):
    if wait:
        task.wait_task_completion(timeout=timeout)
    table = PrettyTable(['task', 'status', 'href'])
    table.add_row([task.task.operation_name or task.task.operation, task.status, task.href])
    table.align = 'l'
    print(table)


def parse_range(text):
    start, _, end = text.partition('-')
    return IPRange(start_address=start.strip(), end_address=end.strip() or None)


@click.group()
@click.option('--config',
              default=None,
              envvar='OSMVCD_CONFIG',
              type=click.Path(exists=True, dir_okay=False),
              help='yaml configuration file.  ' +
                   'Also can set OSMVCD_CONFIG in environment')
@click.option('--url',
              default=None,
              help='vCloud Director url.  ' +
                   'Also can set OSMVCD_VCD_URL in environment')
@click.option('--user',
              default=None,
              help='organization user.  ' +
                   'Also can set OSMVCD_VCD_USER in environment')
@click.option('--password',
              default=None,
              help='password of the user.  ' +
                   'Also can set OSMVCD_VCD_PASSWORD in environment')
@click.option('--org',
              default=None,
              help='organization name.  ' +
                   'Also can set OSMVCD_VCD_ORG in environment')
@click.option('--vdc',
              default=None,
              help='restricts vApp lookups to this VDC.  ' +
                   'Also can set OSMVCD_VCD_VDC in environment')
@click.option('--debug',
              is_flag=True,
              help='enable debug logging')
@click.pass_context
def cli(ctx, config, url, user, password, org, vdc, debug):
    overrides = {"vcd": {"url": url, "user": user, "password": password, "org": org, "vdc": vdc},
                 "global": {"loglevel": "DEBUG" if debug else None}}
    ctx.obj = CliContext(config, overrides)


####################
# vApp operations
####################

@cli.command(name='vapp-list')
@click.pass_context
def vapp_list(ctx):
    '''list the vApps of the organization'''
    try:
        records = ctx.obj.client.query_records('vApp')
    except VcdException as inst:
        fail(inst)
    table = PrettyTable(['vapp name', 'vdc', 'status', 'href'])
    for record in records:
        table.add_row([record.get('name'), record.get('vdcName'), record.get('status'), record.get('href')])
    table.align = 'l'
    print(table)


@cli.command(name='vapp-show')
@click.argument('name')
@click.pass_context
def vapp_show(ctx, name):
    '''shows the details of a vApp

    NAME: name of the vApp
    '''
    try:
        vapp = find_vapp(ctx, name)
    except VcdException as inst:
        fail(inst)
    table = PrettyTable(['field', 'value'])
    table.add_row(['name', vapp.vapp.name])
    table.add_row(['id', vapp.vapp.id])
    table.add_row(['href', vapp.vapp.href])
    table.add_row(['description', vapp.vapp.description or ''])
    table.add_row(['status', VAPP_STATUSES.get(vapp.vapp.status)])
    table.add_row(['deployed', vapp.vapp.deployed])
    table.add_row(['vms', ', '.join(vm.name for vm in vapp.vapp.children)])
    section = vapp.vapp.network_config_section
    table.add_row(['networks', ', '.join(section.network_names()) if section is not None else ''])
    table.add_row(['tasks', ', '.join('{} ({})'.format(task.operation_name, task.status)
                                      for task in vapp.vapp.tasks)])
    table.align = 'l'
    print(table)


@cli.command(name='vapp-status')
@click.argument('name')
@click.pass_context
def vapp_status(ctx, name):
    '''prints the status of a vApp

    NAME: name of the vApp
    '''
    try:
        print(find_vapp(ctx, name).get_status())
    except VcdException as inst:
        fail(inst)


@cli.command(name='vapp-wait')
@click.argument('name')
@click.option('--status', default='UNRESOLVED', show_default=True,
              help='waits while the vApp is in this status')
@click.option('--timeout', default=None, type=int,
              help='seconds to wait, max_retry_timeout by default')
@click.pass_context
def vapp_wait(ctx, name, status, timeout):
    '''waits until a vApp leaves a status

    NAME: name of the vApp
    '''
    try:
        vapp = find_vapp(ctx, name)
        vapp.block_while_status(status, timeout or ctx.obj.client.max_retry_timeout)
        print(vapp.get_status())
    except VcdException as inst:
        fail(inst)


def vapp_task_command(command_name, method_name, help_text):
    @click.argument('name')
    @click.option('--wait', is_flag=True, help='waits for the task to finish')
    @click.pass_context
    def command(ctx, name, wait):
        try:
            vapp = find_vapp(ctx, name)
            print_task(getattr(vapp, method_name)(), wait)
        except VcdException as inst:
            fail(inst)
    command.__doc__ = '''{}

    NAME: name of the vApp
    '''.format(help_text)
    return cli.command(name=command_name)(command)


vapp_power_on = vapp_task_command('vapp-power-on', 'power_on', 'powers on a vApp')
vapp_power_off = vapp_task_command('vapp-power-off', 'power_off', 'powers off a vApp')
vapp_reboot = vapp_task_command('vapp-reboot', 'reboot', 'reboots a vApp')
vapp_reset = vapp_task_command('vapp-reset', 'reset', 'resets a vApp')
vapp_suspend = vapp_task_command('vapp-suspend', 'suspend', 'suspends a vApp')
vapp_shutdown = vapp_task_command('vapp-shutdown', 'shutdown', 'shuts down the guest OS of a vApp')
vapp_deploy = vapp_task_command('vapp-deploy', 'deploy', 'deploys a vApp without powering it on')
vapp_undeploy = vapp_task_command('vapp-undeploy', 'undeploy', 'undeploys a vApp, powering it off')
vapp_delete = vapp_task_command('vapp-delete', 'delete', 'deletes a vApp')


####################
# Metadata operations
####################

@cli.command(name='metadata-list')
@click.argument('name')
@click.pass_context
def metadata_list(ctx, name):
    '''list the metadata of a vApp

    NAME: name of the vApp
    '''
    try:
        metadata = find_vapp(ctx, name).get_metadata()
    except VcdException as inst:
        fail(inst)
    table = PrettyTable(['key', 'value', 'type'])
    for entry in metadata.entries:
        table.add_row([entry.key, entry.value, entry.value_type])
    table.align = 'l'
    print(table)


@cli.command(name='metadata-set')
@click.argument('name')
@click.argument('key')
@click.argument('value')
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def metadata_set(ctx, name, key, value, wait):
    '''sets a metadata value of a vApp

    NAME: name of the vApp
    '''
    try:
        print_task(find_vapp(ctx, name).add_metadata(key, value), wait)
    except VcdException as inst:
        fail(inst)


@cli.command(name='metadata-delete')
@click.argument('name')
@click.argument('key')
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def metadata_delete(ctx, name, key, wait):
    '''deletes a metadata key of a vApp

    NAME: name of the vApp
    '''
    try:
        print_task(find_vapp(ctx, name).delete_metadata(key), wait)
    except VcdException as inst:
        fail(inst)


####################
# Network operations
####################

@cli.command(name='vapp-network-list')
@click.argument('name')
@click.pass_context
def vapp_network_list(ctx, name):
    '''list the networks of a vApp

    NAME: name of the vApp
    '''
    try:
        section = find_vapp(ctx, name).get_network_config_section()
    except VcdException as inst:
        fail(inst)
    table = PrettyTable(['network name', 'fence mode', 'gateway', 'netmask', 'deployed'])
    for config in section.network_configs:
        configuration = config.configuration
        scope = configuration.ip_scopes[0] if configuration is not None and configuration.ip_scopes else None
        table.add_row([config.network_name,
                       configuration.fence_mode if configuration is not None else '',
                       scope.gateway if scope is not None else '',
                       scope.netmask if scope is not None else '',
                       config.is_deployed])
    table.align = 'l'
    print(table)


@cli.command(name='vapp-network-add-isolated')
@click.argument('name')
@click.option('--network-name', required=True, help='name of the new vApp network')
@click.option('--gateway', required=True, help='gateway IP address')
@click.option('--netmask', required=True, help='network mask, e.g. 255.255.255.0')
@click.option('--dns1', default=None, help='primary DNS server')
@click.option('--dns2', default=None, help='secondary DNS server')
@click.option('--dns-suffix', default=None, help='DNS suffix')
@click.option('--static-range', multiple=True,
              help='static IP pool as START-END, can be repeated')
@click.option('--dhcp-range', default=None,
              help='enables DHCP on START[-END]')
@click.option('--guest-vlan-allowed', is_flag=True, help='allows guest VLAN tagging')
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def vapp_network_add_isolated(ctx, name, network_name, gateway, netmask, dns1, dns2, dns_suffix,
                              static_range, dhcp_range, guest_vlan_allowed, wait):
    '''creates an isolated network in a vApp

    NAME: name of the vApp
    '''
    dhcp_settings = None
    if dhcp_range:
        dhcp_settings = DhcpSettings(is_enabled=True, ip_range=parse_range(dhcp_range))
    settings = VappNetworkSettings(name=network_name, gateway=gateway, netmask=netmask,
                                   dns1=dns1, dns2=dns2, dns_suffix=dns_suffix,
                                   guest_vlan_allowed=guest_vlan_allowed,
                                   static_ip_ranges=[parse_range(r) for r in static_range],
                                   dhcp_settings=dhcp_settings)
    try:
        print_task(find_vapp(ctx, name).add_isolated_network(settings), wait)
    except VcdException as inst:
        fail(inst)


@cli.command(name='vapp-network-remove')
@click.argument('name')
@click.argument('network_name')
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def vapp_network_remove(ctx, name, network_name, wait):
    '''removes a network of a vApp

    NAME: name of the vApp

    NETWORK_NAME: name of the vApp network
    '''
    try:
        print_task(find_vapp(ctx, name).remove_isolated_network(network_name), wait)
    except VcdException as inst:
        fail(inst)


####################
# VM operations
####################

@cli.command(name='vm-set-cpu')
@click.argument('name')
@click.argument('count', type=int)
@click.option('--cores-per-socket', default=None, type=int, help='cores per virtual socket')
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def vm_set_cpu(ctx, name, count, cores_per_socket, wait):
    '''sets the virtual CPU count of the VM of a vApp

    NAME: name of the vApp
    '''
    try:
        print_task(find_vapp(ctx, name).change_cpu_count_with_core(count, cores_per_socket), wait)
    except VcdException as inst:
        fail(inst)


@cli.command(name='vm-set-memory')
@click.argument('name')
@click.argument('size', type=int)
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def vm_set_memory(ctx, name, size, wait):
    '''sets the memory of the VM of a vApp

    NAME: name of the vApp

    SIZE: memory in MB
    '''
    try:
        print_task(find_vapp(ctx, name).change_memory_size(size), wait)
    except VcdException as inst:
        fail(inst)


@cli.command(name='vm-rename')
@click.argument('name')
@click.argument('new_name')
@click.option('--wait', is_flag=True, help='waits for the task to finish')
@click.pass_context
def vm_rename(ctx, name, new_name, wait):
    '''renames the VM of a vApp

    NAME: name of the vApp
    '''
    try:
        print_task(find_vapp(ctx, name).change_vm_name(new_name), wait)
    except VcdException as inst:
        fail(inst)


if __name__ == '__main__':
    cli()
